"""Dashboard counters."""
from __future__ import annotations

from knowcode.client import AdminClient, ApiError, SessionExpired
from knowcode.models import AdminStats


class DashboardService:
    """Stats with an inline error; the page offers a manual retry."""

    def __init__(self, client: AdminClient):
        self.client = client
        self.stats: AdminStats | None = None
        self.error: str | None = None

    def refresh(self) -> None:
        try:
            self.stats = self.client.stats()
        except SessionExpired:
            raise
        except ApiError as exc:
            self.error = exc.message
            return
        self.error = None

    def stat_cards(self) -> list[dict[str, object]]:
        stats = self.stats
        if stats is None:
            return []
        return [
            {"label": "Pending", "value": stats.pending_count, "highlight": stats.pending_count > 0},
            {"label": "Approved Today", "value": stats.approved_today, "highlight": False},
            {"label": "Total Certificates", "value": stats.total_certificates, "highlight": False},
            {"label": "Rejections", "value": stats.rejected_count, "highlight": False},
        ]

    def snapshot(self) -> dict[str, object]:
        if self.error:
            return {"error": self.error}
        return {
            "error": None,
            "cards": self.stat_cards(),
            "stats": self.stats.model_dump(mode="json") if self.stats else None,
        }
