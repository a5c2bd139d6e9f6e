"""In-memory registry of exam sessions and admin portals."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Generic, Protocol, TypeVar

from knowcode.config import SESSION_TTL_MINUTES
from knowcode.utils.time_utils import utc_now

log = logging.getLogger(__name__)


class Expirable(Protocol):
    last_seen: datetime

    def touch(self) -> None: ...


S = TypeVar("S", bound=Expirable)


class SessionStore(Generic[S]):
    """Thread-safe map of key -> session; reads refresh ``last_seen``."""

    def __init__(self, name: str, ttl: timedelta = timedelta(minutes=SESSION_TTL_MINUTES)):
        self.name = name
        self.ttl = ttl
        self._items: dict[str, S] = {}
        self._lock = threading.Lock()

    def add(self, key: str, session: S) -> S:
        with self._lock:
            self._items[key] = session
        return session

    def get(self, key: str) -> S | None:
        with self._lock:
            session = self._items.get(key)
        if session is not None:
            session.touch()
        return session

    def remove(self, key: str) -> S | None:
        with self._lock:
            return self._items.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def expire_idle(self, now: datetime | None = None) -> int:
        """Drop sessions idle longer than ``ttl``. Returns how many were dropped."""
        now = now or utc_now()
        with self._lock:
            stale = [k for k, s in self._items.items() if now - s.last_seen > self.ttl]
            for key in stale:
                del self._items[key]
        if stale:
            log.info("Expired %d idle %s", len(stale), self.name)
        return len(stale)
