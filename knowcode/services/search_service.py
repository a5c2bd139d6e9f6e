"""Callsign search across all attempts."""
from __future__ import annotations

from knowcode.client import AdminClient, ApiError, SessionExpired
from knowcode.models import Attempt
from knowcode.models.base import Identifier
from knowcode.services.toast import ToastCenter


def group_by_callsign(attempts: list[Attempt]) -> list[tuple[str, list[Attempt]]]:
    """One group per callsign, in order of first appearance."""
    groups: dict[str, list[Attempt]] = {}
    for attempt in attempts:
        groups.setdefault(attempt.callsign, []).append(attempt)
    return list(groups.items())


class SearchService:
    def __init__(self, client: AdminClient, toasts: ToastCenter):
        self.client = client
        self.toasts = toasts
        self.query = ""
        self.results: list[Attempt] = []
        self.searched = False

    def search(self, query: str | None = None) -> list[Attempt]:
        """Run (or re-run, with ``query=None``) a search. Blank queries do nothing."""
        if query is not None:
            self.query = query.strip().upper()
        if not self.query:
            return self.results
        self.searched = True
        try:
            self.results = self.client.search(self.query)
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
        return self.results

    def grouped(self) -> list[tuple[str, list[Attempt]]]:
        return group_by_callsign(self.results)

    def approve(self, attempt_id: Identifier) -> None:
        try:
            result = self.client.approve(attempt_id)
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
            return
        self.toasts.success(f"Approved - Certificate #{result.certificate_number}")
        self.search()

    def reject(self, attempt_id: Identifier) -> None:
        try:
            self.client.reject(attempt_id, None)
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
            return
        self.toasts.success("Rejected")
        self.search()

    def _row(self, attempt: Attempt) -> dict[str, object]:
        row = attempt.model_dump(mode="json")
        row["certificate_url"] = (
            self.client.certificate_url(attempt.id) if attempt.certificate_number else None
        )
        return row

    def snapshot(self) -> dict[str, object]:
        return {
            "query": self.query,
            "searched": self.searched,
            "groups": [
                {"callsign": callsign, "attempts": [self._row(a) for a in items]}
                for callsign, items in self.grouped()
            ],
        }
