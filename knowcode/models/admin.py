"""Admin authentication and settings models."""
from pydantic import Field

from knowcode.models.base import ApiModel, Identifier


class LoginRequest(ApiModel):
    """Admin login request."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(ApiModel):
    """JWT issued by the exam API."""

    token: str
    expires_in: int | None = None


class Settings(ApiModel):
    """Server configuration shown read-only on the settings page."""

    database_url: str = ""
    listen_addr: str = ""
    static_dir: str = ""
    log_level: str = ""
    qrz_enabled: bool = False


class EmailTemplate(ApiModel):
    """Outreach email template."""

    subject: str = ""
    template: str = ""


class EmailGenerateRequest(ApiModel):
    member_id: Identifier


class GeneratedEmail(ApiModel):
    """Outreach email rendered upstream for one member."""

    email: str
    subject: str = ""
    recipient_email: str | None = None
