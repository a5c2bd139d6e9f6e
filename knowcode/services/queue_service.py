"""Pending queue: approve or reject passing attempts."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from knowcode.client import AdminClient, ApiError, SessionExpired
from knowcode.config import COPY_PASS_HINT, QUESTIONS_PASS_HINT
from knowcode.models import ApproveResult, AttemptHistory, QueueItem
from knowcode.models.base import Identifier
from knowcode.services.optimistic import OptimisticCommand
from knowcode.services.toast import ToastCenter
from knowcode.utils.time_utils import format_relative_time, parse_iso_timestamp

log = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def created_key(item: QueueItem) -> datetime:
    return parse_iso_timestamp(item.created_at) or _EPOCH


def sort_queue(items: list[QueueItem]) -> None:
    """Oldest first; stable, so equal timestamps keep their order."""
    items.sort(key=created_key)


def is_passing(item: QueueItem) -> bool:
    return (
        item.questions_correct >= QUESTIONS_PASS_HINT
        or (item.consecutive_correct or 0) >= COPY_PASS_HINT
    )


class QueueService:
    def __init__(self, client: AdminClient, toasts: ToastCenter):
        self.client = client
        self.toasts = toasts
        self.items: list[QueueItem] = []
        self.pending_count = 0
        self.expanded_callsign: str | None = None
        self.history: dict[str, list[AttemptHistory]] = {}

    def refresh(self) -> None:
        try:
            items = self.client.queue()
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
            return
        sort_queue(items)
        self.items = items
        self.pending_count = len(items)

    def _find(self, attempt_id: Identifier) -> int:
        for index, item in enumerate(self.items):
            if str(item.id) == str(attempt_id):
                return index
        raise KeyError(attempt_id)

    def _removal(self, attempt_id: Identifier, name: str, call) -> OptimisticCommand:
        index = self._find(attempt_id)
        item = self.items[index]

        def apply() -> None:
            del self.items[index]

        def revert() -> None:
            self.items.insert(min(index, len(self.items)), item)
            sort_queue(self.items)

        return OptimisticCommand(name=name, apply=apply, call=call, revert=revert)

    def approve(self, attempt_id: Identifier) -> ApproveResult | None:
        command = self._removal(
            attempt_id, f"approve {attempt_id}", lambda: self.client.approve(attempt_id)
        )
        try:
            result = command.run()
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
            return None
        except ValueError:
            # 2xx with an unreadable body; the item is already restored
            log.exception("Unexpected approve response for %s", attempt_id)
            self.toasts.error("Failed to approve")
            return None
        self.pending_count = len(self.items)
        self.toasts.success(f"Approved - Certificate #{result.certificate_number}")
        log.info("Approved attempt %s, certificate %s", attempt_id, result.certificate_number)
        return result

    def reject(self, attempt_id: Identifier, note: str | None = None) -> bool:
        note = (note or "").strip() or None
        command = self._removal(
            attempt_id, f"reject {attempt_id}", lambda: self.client.reject(attempt_id, note)
        )
        try:
            command.run()
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
            return False
        except ValueError:
            log.exception("Unexpected reject response for %s", attempt_id)
            self.toasts.error("Failed to reject")
            return False
        self.pending_count = len(self.items)
        self.toasts.success("Rejected")
        log.info("Rejected attempt %s", attempt_id)
        return True

    def toggle_history(self, callsign: str) -> list[AttemptHistory] | None:
        """Expand one callsign's history (fetched once), or collapse it."""
        if self.expanded_callsign == callsign:
            self.expanded_callsign = None
            return None
        self.expanded_callsign = callsign
        if callsign not in self.history:
            try:
                self.history[callsign] = self.client.history(callsign)
            except SessionExpired:
                raise
            except ApiError as exc:
                self.toasts.error(exc.message)
                return None
        return self.history[callsign]

    def snapshot(self, now: datetime | None = None) -> dict[str, object]:
        expanded = self.expanded_callsign
        return {
            "pending_count": self.pending_count,
            "items": [
                {
                    **item.model_dump(mode="json"),
                    "age": format_relative_time(item.created_at, now),
                    "passing": is_passing(item),
                }
                for item in self.items
            ],
            "expanded_callsign": expanded,
            "history": [
                h.model_dump(mode="json") for h in self.history.get(expanded or "", [])
            ],
        }
