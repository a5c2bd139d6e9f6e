"""Read-only aggregates computed upstream."""
from datetime import datetime

from pydantic import Field

from knowcode.models.base import ApiModel, Identifier


class LeaderboardEntry(ApiModel):
    """Honor roll row."""

    callsign: str
    highest_speed_passed: int | None = None
    total_attempts: int = 0
    total_passes: int = 0
    first_passed_at: datetime | None = None


class RosterEntry(ApiModel):
    """Certified member."""

    callsign: str
    certificate_number: int | str | None = None
    validated_at: datetime | None = None


class SpeedStats(ApiModel):
    test_speed: int
    attempts: int = 0
    passes: int = 0


class Stats(ApiModel):
    """Public statistics."""

    total_attempts: int = 0
    total_passes: int = 0
    unique_callsigns: int = 0
    attempts_by_speed: list[SpeedStats] = Field(default_factory=list)


class RecentActivity(ApiModel):
    id: Identifier
    callsign: str
    action: str
    created_at: datetime


class RecentAttempt(ApiModel):
    id: Identifier
    callsign: str
    questions_correct: int = 0
    consecutive_correct: int | None = None
    passed: bool = False
    created_at: datetime


class AdminStats(ApiModel):
    """Dashboard statistics."""

    pending_count: int = 0
    approved_today: int = 0
    total_certificates: int = 0
    rejected_count: int = 0
    recent_activity: list[RecentActivity] = Field(default_factory=list)
    recent_attempts: list[RecentAttempt] = Field(default_factory=list)
