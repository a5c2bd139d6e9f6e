"""Pydantic models."""
from knowcode.models.admin import (
    EmailGenerateRequest,
    EmailTemplate,
    GeneratedEmail,
    LoginRequest,
    LoginResponse,
    Settings,
)
from knowcode.models.attempts import (
    ApprovedAttempt,
    ApprovedPage,
    ApproveResult,
    Attempt,
    AttemptHistory,
    AttemptPage,
    AttemptRecord,
    MarkReachedOutRequest,
    MarkResult,
    QueueItem,
    RejectRequest,
    Submission,
    SubmissionResult,
)
from knowcode.models.stats import (
    AdminStats,
    LeaderboardEntry,
    RecentActivity,
    RecentAttempt,
    RosterEntry,
    Stats,
)
from knowcode.models.tests import (
    OPTIONS,
    AdminQuestion,
    Question,
    QuestionInput,
    Segment,
    Test,
    TestUpdate,
)

__all__ = [
    "OPTIONS",
    "AdminQuestion",
    "AdminStats",
    "ApprovedAttempt",
    "ApprovedPage",
    "ApproveResult",
    "Attempt",
    "AttemptHistory",
    "AttemptPage",
    "AttemptRecord",
    "EmailGenerateRequest",
    "EmailTemplate",
    "GeneratedEmail",
    "LeaderboardEntry",
    "LoginRequest",
    "LoginResponse",
    "MarkReachedOutRequest",
    "MarkResult",
    "Question",
    "QuestionInput",
    "QueueItem",
    "RecentActivity",
    "RecentAttempt",
    "RejectRequest",
    "RosterEntry",
    "Segment",
    "Settings",
    "Stats",
    "Submission",
    "SubmissionResult",
    "Test",
    "TestUpdate",
]
