"""Admin session object passed to every authenticated call."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from knowcode.models import LoginResponse

log = logging.getLogger(__name__)


def token_expiry(token: str) -> datetime | None:
    """Read the ``exp`` claim without verifying the signature.

    The exam API owns the signing key; the front only needs to know when the
    token stops being useful.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return None
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or isinstance(exp, bool):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


@dataclass
class AdminSession:
    """Bearer token plus expiry. ``token=None`` means logged out."""

    token: str | None = None
    expires_at: datetime | None = None

    @classmethod
    def from_login(cls, payload: LoginResponse, now: datetime | None = None) -> AdminSession:
        now = now or datetime.now(timezone.utc)
        expires_at = token_expiry(payload.token)
        if expires_at is None and payload.expires_in:
            expires_at = now + timedelta(seconds=payload.expires_in)
        return cls(token=payload.token, expires_at=expires_at)

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def is_authenticated(self, now: datetime | None = None) -> bool:
        return bool(self.token) and not self.is_expired(now)

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def invalidate(self) -> None:
        """Forced logout."""
        if self.token:
            log.info("Admin session invalidated")
        self.token = None
        self.expires_at = None
