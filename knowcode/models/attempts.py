"""Attempt-related models."""
from datetime import datetime
from typing import Literal

from pydantic import Field

from knowcode.models.base import ApiModel, Identifier

PassReason = Literal["questions", "copy", "both"]


class Submission(ApiModel):
    """Body for ``POST /api/tests/{id}/submit``."""

    callsign: str = Field(..., min_length=1)
    answers: dict[str, str] = Field(default_factory=dict)
    copy_text: str | None = None
    audio_progress: float = 0


class SubmissionResult(ApiModel):
    """Upstream verdict for a submission."""

    passed: bool = False
    score: int = 0
    passing_score: int | None = None
    pass_reason: PassReason | None = None
    consecutive_correct: int | None = None
    correct_answers: dict[str, str] | None = None
    certificate_id: Identifier | None = None


class AttemptRecord(ApiModel):
    """Body for ``POST /api/attempts`` (abandoned tests)."""

    callsign: str
    test_speed: int
    questions_correct: int = 0
    copy_chars: int = 0
    passed: bool = False
    audio_progress: float = 0


class Attempt(ApiModel):
    """Attempt row as listed by the admin endpoints."""

    id: Identifier
    callsign: str
    test_speed: int | None = None
    questions_correct: int = 0
    consecutive_correct: int | None = None
    copy_chars: int = 0
    passed: bool = False
    pass_reason: PassReason | None = None
    validation_status: str | None = None
    admin_note: str | None = None
    certificate_number: int | str | None = None
    reached_out: bool = False
    created_at: datetime | None = None
    validated_at: datetime | None = None
    email: str | None = None
    copy_text: str | None = None


class QueueItem(ApiModel):
    """Pending attempt awaiting review."""

    id: Identifier
    callsign: str
    questions_correct: int = 0
    consecutive_correct: int | None = None
    copy_chars: int = 0
    created_at: datetime


class AttemptHistory(ApiModel):
    """Previous attempt of a callsign shown next to a queue item."""

    id: Identifier
    questions_correct: int = 0
    copy_chars: int = 0
    passed: bool = False
    validation_status: str | None = None
    created_at: datetime


class ApprovedAttempt(ApiModel):
    """Approved attempt with outreach tracking."""

    id: Identifier
    callsign: str
    certificate_number: int | str | None = None
    validated_at: datetime | None = None
    email: str | None = None
    reached_out: bool = False


class ApprovedPage(ApiModel):
    """One page of approved attempts."""

    items: list[ApprovedAttempt] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 25


class AttemptPage(ApiModel):
    """One page of attempts from ``GET /api/admin/attempts``."""

    items: list[Attempt] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 25


class ApproveResult(ApiModel):
    """Approval response carrying the newly issued certificate number."""

    certificate_number: int | str | None = None


class RejectRequest(ApiModel):
    """Body for rejecting an attempt."""

    note: str | None = None


class MarkReachedOutRequest(ApiModel):
    """Body for the bulk reached-out action."""

    ids: list[Identifier]


class MarkResult(ApiModel):
    """Number of rows marked as reached out."""

    count: int = 0
