"""Session lookup dependencies for FastAPI."""
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from knowcode.client import Transport
from knowcode.services.admin_portal import AdminPortal
from knowcode.services.exam_session import ExamSession
from knowcode.services.session_store import SessionStore

exam_sessions: SessionStore[ExamSession] = SessionStore("exam sessions")
admin_portals: SessionStore[AdminPortal] = SessionStore("admin portals")

# HTTP Bearer scheme for the upstream admin token
security = HTTPBearer(auto_error=False)


@lru_cache
def get_transport() -> Transport:
    """Shared connection pool to the exam API."""
    return Transport()


def get_exam_session(session_id: str) -> ExamSession:
    """Raises:
        HTTPException: 404 for unknown or expired sessions.
    """
    session = exam_sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def get_portal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AdminPortal:
    """Get the admin portal for the bearer token.

    Raises:
        HTTPException: 401 if not authenticated or the session is gone.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    portal = admin_portals.get(token)
    if portal is None or not portal.authenticated:
        if portal is not None:
            portal.logout()
            admin_portals.remove(token)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return portal
