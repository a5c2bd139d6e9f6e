"""Service for cleanup operations."""
import logging
import threading
import time

from knowcode.config import SESSION_CLEANUP_INTERVAL_SECONDS
from knowcode.services.session_store import SessionStore

log = logging.getLogger(__name__)


def cleanup_idle_sessions(*stores: SessionStore) -> int:
    """Expire idle entries in every store."""
    removed = 0
    for store in stores:
        try:
            removed += store.expire_idle()
        except Exception:
            log.exception("Failed to clean up %s", store.name)
    return removed


def schedule_sessions_cleanup(
    *stores: SessionStore, interval: int = SESSION_CLEANUP_INTERVAL_SECONDS
) -> threading.Thread:
    """Schedule periodic cleanup of idle sessions."""

    def _worker() -> None:
        while True:
            time.sleep(interval)
            cleanup_idle_sessions(*stores)

    thread = threading.Thread(
        target=_worker,
        name="sessions_cleanup",
        daemon=True,
    )
    thread.start()
    return thread
