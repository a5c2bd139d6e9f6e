"""All attempts, filterable by outcome, callsign and date range."""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace

from knowcode.client import AdminClient, ApiError, SessionExpired
from knowcode.config import APPROVED_PER_PAGE
from knowcode.models import AttemptPage
from knowcode.models.base import Identifier
from knowcode.services import pagination
from knowcode.services.toast import ToastCenter


@dataclass(frozen=True)
class AttemptFilters:
    passed: bool | None = None
    callsign: str = ""
    date_from: str = ""
    date_to: str = ""


class AttemptsService:
    def __init__(self, client: AdminClient, toasts: ToastCenter, per_page: int = APPROVED_PER_PAGE):
        self.client = client
        self.toasts = toasts
        self.per_page = per_page
        self.filters = AttemptFilters()
        self.data = AttemptPage(per_page=per_page)
        self.expanded_id: str | None = None

    def refresh(self, page: int = 1) -> None:
        f = self.filters
        try:
            self.data = self.client.attempts(
                page=page,
                per_page=self.per_page,
                passed=f.passed,
                callsign=f.callsign or None,
                date_from=f.date_from or None,
                date_to=f.date_to or None,
            )
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)

    def set_filters(self, **changes: object) -> None:
        """Change filters and go back to page 1."""
        if "callsign" in changes:
            changes["callsign"] = str(changes["callsign"] or "").upper()
        self.filters = replace(self.filters, **changes)
        self.refresh(1)

    def toggle_expanded(self, attempt_id: Identifier) -> None:
        key = str(attempt_id)
        self.expanded_id = None if self.expanded_id == key else key

    @property
    def total_pages(self) -> int:
        return pagination.total_pages(self.data.total, self.data.per_page)

    def snapshot(self) -> dict[str, object]:
        return {
            **self.data.model_dump(mode="json"),
            "filters": asdict(self.filters),
            "expanded_id": self.expanded_id,
            "total_pages": self.total_pages,
        }
