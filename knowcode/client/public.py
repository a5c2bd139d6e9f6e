"""Client for the public exam endpoints."""
from __future__ import annotations

import logging
from urllib.parse import quote

from knowcode.client.errors import SubmissionBlocked
from knowcode.client.http import Transport, error_message, json_body, raise_for_api_error
from knowcode.config import LEADERBOARD_LIMIT
from knowcode.models import (
    AttemptRecord,
    LeaderboardEntry,
    Question,
    RosterEntry,
    Stats,
    Submission,
    SubmissionResult,
    Test,
)
from knowcode.models.base import Identifier

log = logging.getLogger(__name__)


def _segment(value: Identifier) -> str:
    return quote(str(value), safe="")


class PublicClient:
    """Unauthenticated calls made by the exam flow."""

    def __init__(self, transport: Transport | None = None):
        self.transport = transport or Transport()

    def list_tests(self) -> list[Test]:
        response = self.transport.request("GET", "/api/tests", fallback="Failed to fetch tests")
        raise_for_api_error(response, "Failed to fetch tests")
        return [Test.model_validate(item) for item in json_body(response) or []]

    def get_questions(self, test_id: Identifier) -> list[Question]:
        fallback = "Failed to load test questions"
        response = self.transport.request(
            "GET", f"/api/tests/{_segment(test_id)}/questions", fallback=fallback
        )
        raise_for_api_error(response, fallback)
        return [Question.model_validate(item) for item in json_body(response) or []]

    def submit(self, test_id: Identifier, submission: Submission) -> SubmissionResult:
        """Submit a finished test.

        Raises:
            SubmissionBlocked: the API answered 400; the body is the reason.
            ApiError: any other failure.
        """
        fallback = "Failed to submit test"
        response = self.transport.request(
            "POST",
            f"/api/tests/{_segment(test_id)}/submit",
            fallback=fallback,
            json=submission.model_dump(),
        )
        if response.status_code == 400:
            raise SubmissionBlocked(response.text or "")
        raise_for_api_error(response, fallback)
        return SubmissionResult.model_validate(json_body(response) or {})

    def record_attempt(self, record: AttemptRecord) -> dict[str, object] | None:
        """Record an attempt outside the submit flow (abandoned tests)."""
        fallback = "Failed to record attempt"
        response = self.transport.request(
            "POST", "/api/attempts", fallback=fallback, json=record.model_dump()
        )
        if response.status_code == 400:
            raise SubmissionBlocked(error_message(response, fallback))
        raise_for_api_error(response, fallback)
        return json_body(response)

    def leaderboard(self, limit: int = LEADERBOARD_LIMIT) -> list[LeaderboardEntry]:
        fallback = "Failed to fetch leaderboard"
        response = self.transport.request(
            "GET", "/api/leaderboard", fallback=fallback, params={"limit": limit}
        )
        raise_for_api_error(response, fallback)
        return [LeaderboardEntry.model_validate(item) for item in json_body(response) or []]

    def stats(self) -> Stats:
        response = self.transport.request("GET", "/api/stats", fallback="Failed to fetch stats")
        raise_for_api_error(response, "Failed to fetch stats")
        return Stats.model_validate(json_body(response) or {})

    def roster(self) -> list[RosterEntry]:
        response = self.transport.request("GET", "/api/roster", fallback="Failed to fetch roster")
        raise_for_api_error(response, "Failed to fetch roster")
        return [RosterEntry.model_validate(item) for item in json_body(response) or []]
