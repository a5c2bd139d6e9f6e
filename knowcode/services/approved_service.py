"""Approved members: outreach tracking and welcome emails."""
from __future__ import annotations

import logging
from urllib.parse import quote

from knowcode.client import AdminClient, ApiError, SessionExpired
from knowcode.config import APPROVED_PER_PAGE
from knowcode.models import ApprovedAttempt, ApprovedPage, GeneratedEmail
from knowcode.models.base import Identifier
from knowcode.services import pagination
from knowcode.services.optimistic import OptimisticCommand
from knowcode.services.toast import ToastCenter

log = logging.getLogger(__name__)

GMAIL_COMPOSE_URL = "https://mail.google.com/mail/?view=cm"


def gmail_compose_url(email: GeneratedEmail) -> str | None:
    """Gmail compose link prefilled with a generated email."""
    if not email.recipient_email:
        return None
    return (
        f"{GMAIL_COMPOSE_URL}&to={quote(email.recipient_email, safe='')}"
        f"&su={quote(email.subject, safe='')}"
        f"&body={quote(email.email, safe='')}"
    )


class ApprovedService:
    """One page of approved attempts with a reached-out filter and selection."""

    def __init__(self, client: AdminClient, toasts: ToastCenter, per_page: int = APPROVED_PER_PAGE):
        self.client = client
        self.toasts = toasts
        self.per_page = per_page
        self.data = ApprovedPage(per_page=per_page)
        self.reached_out: bool | None = None
        self.selected: set[str] = set()
        self.email_member: Identifier | None = None
        self.generated_email: GeneratedEmail | None = None

    def refresh(self, page: int = 1) -> None:
        try:
            self.data = self.client.approved(page, self.per_page, self.reached_out)
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
            return
        self.selected = set()

    def set_filter(self, reached_out: bool | None) -> None:
        """``None`` shows everyone; ``True``/``False`` filter on outreach."""
        self.reached_out = reached_out
        self.refresh(1)

    def toggle_select(self, item_id: Identifier) -> None:
        key = str(item_id)
        if key in self.selected:
            self.selected.remove(key)
        else:
            self.selected.add(key)

    def toggle_select_all(self) -> None:
        if len(self.selected) == len(self.data.items):
            self.selected = set()
        else:
            self.selected = {str(item.id) for item in self.data.items}

    def mark_reached_out(self) -> int | None:
        if not self.selected:
            return None
        ids = [item.id for item in self.data.items if str(item.id) in self.selected]
        chosen = set(self.selected)

        def apply() -> None:
            for item in self.data.items:
                if str(item.id) in chosen:
                    item.reached_out = True
            self.selected = set()

        command = OptimisticCommand(
            name="mark reached out",
            apply=apply,
            call=lambda: self.client.mark_reached_out(ids),
            revert=lambda: self.refresh(self.data.page),
        )
        try:
            result = command.run()
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
            return None
        except ValueError:
            log.exception("Unexpected mark-reached-out response")
            self.toasts.error("Failed to mark")
            return None
        self.toasts.success(f"Marked {result.count} as reached out")
        return result.count

    def generate_email(self, member_id: Identifier) -> GeneratedEmail | None:
        self.email_member = member_id
        self.generated_email = None
        try:
            self.generated_email = self.client.generate_email(member_id)
        except SessionExpired:
            raise
        except ApiError as exc:
            self.email_member = None
            self.toasts.error(exc.message)
            return None
        return self.generated_email

    def close_email(self) -> None:
        self.email_member = None
        self.generated_email = None

    @property
    def total_pages(self) -> int:
        return pagination.total_pages(self.data.total, self.data.per_page)

    @property
    def showing(self) -> tuple[int, int]:
        return pagination.showing(self.data.total, self.data.page, self.data.per_page)

    def _row(self, item: ApprovedAttempt) -> dict[str, object]:
        row = item.model_dump(mode="json")
        row["certificate_url"] = (
            self.client.certificate_url(item.id) if item.certificate_number else None
        )
        return row

    def snapshot(self) -> dict[str, object]:
        email = self.generated_email
        return {
            **self.data.model_dump(mode="json"),
            "items": [self._row(item) for item in self.data.items],
            "filter": self.reached_out,
            "selected": sorted(self.selected),
            "total_pages": self.total_pages,
            "showing": list(self.showing),
            "email": (
                {
                    "member_id": self.email_member,
                    **email.model_dump(mode="json"),
                    "gmail_url": gmail_compose_url(email),
                }
                if email
                else None
            ),
        }
