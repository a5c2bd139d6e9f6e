"""Time utilities."""
from __future__ import annotations

import math
from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def parse_iso_timestamp(value: object) -> datetime | None:
    """Parse ISO timestamp string to an aware datetime (naive values are UTC)."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_relative_time(value: object, now: datetime | None = None) -> str:
    """Coarse age of a timestamp: ``3d ago``, ``5h ago`` or ``12m ago``."""
    moment = parse_iso_timestamp(value)
    if moment is None:
        return ""
    now = now or utc_now()
    minutes = int((now - moment).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24
    if days > 0:
        return f"{days}d ago"
    if hours > 0:
        return f"{hours}h ago"
    return f"{minutes}m ago"


def format_long_date(day: date | None = None) -> str:
    """US long date, e.g. ``May 1, 2024``."""
    day = day or date.today()
    return f"{day:%B} {day.day}, {day.year}"


def format_clock(seconds: object) -> str:
    """``M:SS`` for a playback position; ``0:00`` when missing or not finite."""
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return "0:00"
    if not seconds or not math.isfinite(seconds):
        return "0:00"
    return f"{int(seconds // 60)}:{int(seconds % 60):02d}"
