"""Everything one logged-in administrator sees."""
from __future__ import annotations

import logging
import threading
from typing import Callable, TypeVar

from knowcode.client import AdminClient, AdminSession, SessionExpired, Transport
from knowcode.services.admin_router import AdminPage, AdminRouter
from knowcode.services.approved_service import ApprovedService
from knowcode.services.attempts_service import AttemptsService
from knowcode.services.dashboard_service import DashboardService
from knowcode.services.editors import TestManager
from knowcode.services.queue_service import QueueService
from knowcode.services.search_service import SearchService
from knowcode.services.settings_service import EmailTemplateEditor, SettingsView
from knowcode.services.toast import ToastCenter
from knowcode.utils.time_utils import utc_now

log = logging.getLogger(__name__)

T = TypeVar("T")


class AdminPortal:
    """Router, page services and toasts bound to one :class:`AdminSession`.

    Page services are refreshed on entry, the way each admin page loads its
    data when it mounts.
    """

    def __init__(self, session: AdminSession, transport: Transport | None = None):
        self.session = session
        self.client = AdminClient(session, transport)
        self.lock = threading.RLock()
        self.last_seen = utc_now()

        self.router = AdminRouter()
        self.toasts = ToastCenter()
        self.dashboard = DashboardService(self.client)
        self.queue = QueueService(self.client, self.toasts)
        self.approved = ApprovedService(self.client, self.toasts)
        self.attempts = AttemptsService(self.client, self.toasts)
        self.search = SearchService(self.client, self.toasts)
        self.tests = TestManager(self.client)
        self.settings = SettingsView(self.client)
        self.email_template = EmailTemplateEditor(self.client, self.toasts)

        if session.is_authenticated():
            self.router.logged_in()

    def touch(self) -> None:
        self.last_seen = utc_now()

    @property
    def authenticated(self) -> bool:
        return self.router.authenticated and self.session.is_authenticated()

    def run(self, action: Callable[[], T]) -> T:
        """Run a page action; an expired session logs the portal out."""
        if not self.authenticated:
            self.logout()
            raise SessionExpired()
        try:
            return action()
        except SessionExpired:
            log.info("Admin session expired, returning to login")
            self.logout()
            raise

    def logout(self) -> None:
        self.session.invalidate()
        self.router.logged_out()
        self.toasts.clear()

    def navigate(self, page: str | AdminPage) -> AdminPage:
        target = self.router.navigate(page)
        self.run(self._load_page)
        return target

    def _load_page(self) -> None:
        page = self.router.page
        if page is AdminPage.DASHBOARD:
            self.dashboard.refresh()
        elif page is AdminPage.QUEUE:
            self.queue.refresh()
        elif page is AdminPage.APPROVED:
            self.approved.refresh(1)
        elif page is AdminPage.ATTEMPTS:
            self.attempts.refresh(1)
        elif page is AdminPage.TESTS:
            self.tests.refresh()
        elif page is AdminPage.SETTINGS:
            self.settings.refresh()
            self.email_template.load()

    def snapshot(self) -> dict[str, object]:
        page = self.router.page
        data: dict[str, object] = {
            "page": page.value,
            "pending_count": self.queue.pending_count,
            "toasts": [t.to_dict() for t in self.toasts.active()],
        }
        if page is AdminPage.DASHBOARD:
            data["dashboard"] = self.dashboard.snapshot()
        elif page is AdminPage.QUEUE:
            data["queue"] = self.queue.snapshot()
        elif page is AdminPage.APPROVED:
            data["approved"] = self.approved.snapshot()
        elif page is AdminPage.ATTEMPTS:
            data["attempts"] = self.attempts.snapshot()
        elif page is AdminPage.SEARCH:
            data["search"] = self.search.snapshot()
        elif page is AdminPage.TESTS:
            data["tests"] = self.tests.snapshot()
        elif page is AdminPage.SETTINGS:
            data["settings"] = {
                "error": self.settings.error,
                "items": self.settings.config_items(),
            }
            data["email_template"] = self.email_template.snapshot()
        return data
