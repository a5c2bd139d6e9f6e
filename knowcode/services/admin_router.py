"""Admin page router: which page an administrator is looking at."""
from __future__ import annotations

import logging
from enum import Enum

log = logging.getLogger(__name__)


class AdminPage(str, Enum):
    LOGIN = "login"
    DASHBOARD = "dashboard"
    QUEUE = "queue"
    APPROVED = "approved"
    ATTEMPTS = "attempts"
    SEARCH = "search"
    TESTS = "tests"
    SETTINGS = "settings"


NAV_PAGES: tuple[AdminPage, ...] = tuple(p for p in AdminPage if p is not AdminPage.LOGIN)


class RouteError(ValueError):
    """Unknown page or navigation while logged out."""


class AdminRouter:
    """Logged out means ``login``; logging in lands on the dashboard."""

    def __init__(self) -> None:
        self._authenticated = False
        self._page = AdminPage.DASHBOARD

    @property
    def page(self) -> AdminPage:
        return self._page if self._authenticated else AdminPage.LOGIN

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    def logged_in(self) -> None:
        self._authenticated = True
        self._page = AdminPage.DASHBOARD

    def logged_out(self) -> None:
        self._authenticated = False
        self._page = AdminPage.DASHBOARD

    def navigate(self, target: str | AdminPage) -> AdminPage:
        try:
            page = AdminPage(target)
        except ValueError:
            raise RouteError(f"Unknown page: {target}") from None
        if not self._authenticated:
            raise RouteError("Not logged in")
        if page is AdminPage.LOGIN:
            raise RouteError("Already logged in")
        log.debug("Admin navigate %s -> %s", self._page.value, page.value)
        self._page = page
        return page
