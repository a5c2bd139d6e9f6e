"""Server settings (read-only) and the outreach email template."""
from __future__ import annotations

import logging

from knowcode.client import AdminClient, ApiError, SessionExpired
from knowcode.models import EmailTemplate, Settings
from knowcode.services.toast import ToastCenter

log = logging.getLogger(__name__)

TEMPLATE_PLACEHOLDERS = ("{callsign}", "{member_number}", "{nickname}")


class SettingsView:
    def __init__(self, client: AdminClient):
        self.client = client
        self.settings: Settings | None = None
        self.error: str | None = None

    def refresh(self) -> None:
        try:
            self.settings = self.client.settings()
        except SessionExpired:
            raise
        except ApiError as exc:
            log.warning("Failed to fetch settings: %s", exc.message)
            self.error = exc.message
            return
        self.error = None

    def config_items(self) -> list[dict[str, object]]:
        s = self.settings
        if s is None:
            return []
        return [
            {"label": "Database", "value": s.database_url},
            {"label": "Listen Address", "value": s.listen_addr},
            {"label": "Static Directory", "value": s.static_dir},
            {"label": "Log Level", "value": s.log_level},
            {
                "label": "QRZ Integration",
                "value": "Enabled" if s.qrz_enabled else "Disabled",
                "status": s.qrz_enabled,
            },
        ]


class EmailTemplateEditor:
    def __init__(self, client: AdminClient, toasts: ToastCenter):
        self.client = client
        self.toasts = toasts
        self.subject = ""
        self.template = ""

    def load(self) -> None:
        try:
            loaded = self.client.email_template()
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
            return
        self.subject = loaded.subject or ""
        self.template = loaded.template

    def save(self, subject: str, template: str) -> bool:
        self.subject = subject
        self.template = template
        try:
            self.client.save_email_template(EmailTemplate(subject=subject, template=template))
        except SessionExpired:
            raise
        except ApiError as exc:
            self.toasts.error(exc.message)
            return False
        self.toasts.success("Template saved")
        return True

    def snapshot(self) -> dict[str, object]:
        return {
            "subject": self.subject,
            "template": self.template,
            "placeholders": list(TEMPLATE_PLACEHOLDERS),
        }
