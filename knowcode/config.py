"""Application configuration and constants."""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Upstream exam API
API_BASE_URL = os.environ.get("KNOWCODE_API_URL", "http://127.0.0.1:3000").rstrip("/")
HTTP_TIMEOUT_SECONDS = _parse_int_env("KNOWCODE_HTTP_TIMEOUT", 15)

# Web front
HOST = os.environ.get("KNOWCODE_HOST", "127.0.0.1")
PORT = _parse_int_env("KNOWCODE_PORT", 8000)
STATIC_DIR = Path(os.environ.get("STATIC_DIR", BASE_DIR / "static"))

# Sessions
SESSION_TTL_MINUTES = _parse_int_env("SESSION_TTL_MINUTES", 120)
SESSION_CLEANUP_INTERVAL_SECONDS = _parse_int_env(
    "SESSION_CLEANUP_INTERVAL_SECONDS", 10 * 60
)

# UI constants
TOAST_SECONDS = _parse_int_env("TOAST_SECONDS", 3)
LEADERBOARD_LIMIT = _parse_int_env("LEADERBOARD_LIMIT", 20)
APPROVED_PER_PAGE = _parse_int_env("APPROVED_PER_PAGE", 25)
DEFAULT_AUDIO_DURATION = _parse_int_env("DEFAULT_AUDIO_DURATION", 531)  # seconds
SEGMENT_PREVIEW_DURATION = 600  # seconds, editor timeline with no end times

# Thresholds shown next to results; the upstream verdict is authoritative
QUESTIONS_PASS_HINT = 7
COPY_PASS_HINT = 100

# Certificates
CERTIFICATE_TEMPLATE_PATH = Path(
    os.environ.get(
        "CERTIFICATE_TEMPLATE_PATH",
        Path(__file__).resolve().parent / "templates" / "certificate-template.svg",
    )
)
CERTIFICATE_WIDTH_PX = 800
CERTIFICATE_HEIGHT_PX = 600
CHROME_PATH = os.environ.get("CHROME_PATH")
PDF_RENDER_TIMEOUT_SECONDS = _parse_int_env("PDF_RENDER_TIMEOUT_SECONDS", 60)
