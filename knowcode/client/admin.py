"""Client for the bearer-authenticated admin endpoints."""
from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from knowcode.client.errors import ApiError, SessionExpired
from knowcode.client.http import Transport, error_message, is_success, json_body
from knowcode.client.session import AdminSession
from knowcode.config import APPROVED_PER_PAGE
from knowcode.models import (
    AdminQuestion,
    AdminStats,
    ApprovedPage,
    ApproveResult,
    Attempt,
    AttemptHistory,
    AttemptPage,
    EmailGenerateRequest,
    EmailTemplate,
    GeneratedEmail,
    LoginRequest,
    LoginResponse,
    MarkReachedOutRequest,
    MarkResult,
    QuestionInput,
    QueueItem,
    RejectRequest,
    Settings,
    Test,
    TestUpdate,
)
from knowcode.models.base import Identifier

log = logging.getLogger(__name__)


def _segment(value: Identifier) -> str:
    return quote(str(value), safe="")


def _flag(value: bool) -> str:
    return "true" if value else "false"


def login(
    username: str, password: str, transport: Transport | None = None
) -> AdminSession:
    """Exchange credentials for an :class:`AdminSession`."""
    transport = transport or Transport()
    body = LoginRequest(username=username, password=password)
    response = transport.request(
        "POST", "/api/admin/login", fallback="Login failed", json=body.model_dump()
    )
    if not is_success(response):
        raise ApiError(response.status_code, error_message(response, "Login failed"))
    return AdminSession.from_login(LoginResponse.model_validate(response.json()))


class AdminClient:
    """Admin API calls bound to one :class:`AdminSession`.

    A 401 from any call invalidates the session and raises
    :class:`SessionExpired`.
    """

    def __init__(self, session: AdminSession, transport: Transport | None = None):
        self.session = session
        self.transport = transport or Transport()

    def _request(
        self,
        method: str,
        path: str,
        fallback: str,
        *,
        params: dict[str, object] | None = None,
        json: object | None = None,
    ) -> requests.Response:
        if not self.session.is_authenticated():
            self.session.invalidate()
            raise SessionExpired()

        response = self.transport.request(
            method,
            path,
            fallback=fallback,
            params=params,
            json=json,
            headers=self.session.auth_headers(),
        )
        if response.status_code == 401:
            log.warning("Admin token rejected on %s %s", method, path)
            self.session.invalidate()
            raise SessionExpired()
        if not is_success(response):
            raise ApiError(response.status_code, error_message(response, fallback))
        return response

    def certificate_url(self, attempt_id: Identifier) -> str:
        """Public certificate link for an approved attempt."""
        return self.transport.url(f"/api/certificate/{_segment(attempt_id)}")

    # Dashboard / queue

    def stats(self) -> AdminStats:
        response = self._request("GET", "/api/admin/stats", "Failed to fetch stats")
        return AdminStats.model_validate(json_body(response) or {})

    def queue(self) -> list[QueueItem]:
        response = self._request("GET", "/api/admin/queue", "Failed to fetch queue")
        return [QueueItem.model_validate(item) for item in json_body(response) or []]

    def history(self, callsign: str) -> list[AttemptHistory]:
        response = self._request(
            "GET",
            f"/api/admin/queue/{_segment(callsign)}/history",
            "Failed to fetch history",
        )
        return [AttemptHistory.model_validate(item) for item in json_body(response) or []]

    def approve(self, attempt_id: Identifier) -> ApproveResult:
        response = self._request(
            "POST", f"/api/admin/queue/{_segment(attempt_id)}/approve", "Failed to approve"
        )
        return ApproveResult.model_validate(json_body(response) or {})

    def reject(self, attempt_id: Identifier, note: str | None = None) -> None:
        self._request(
            "POST",
            f"/api/admin/queue/{_segment(attempt_id)}/reject",
            "Failed to reject",
            json=RejectRequest(note=note).model_dump(),
        )

    # Approved / outreach

    def approved(
        self,
        page: int = 1,
        per_page: int = APPROVED_PER_PAGE,
        reached_out: bool | None = None,
    ) -> ApprovedPage:
        params: dict[str, object] = {"page": page, "per_page": per_page}
        if reached_out is not None:
            params["reached_out"] = _flag(reached_out)
        response = self._request("GET", "/api/admin/approved", "Failed to fetch", params=params)
        return ApprovedPage.model_validate(json_body(response) or {})

    def mark_reached_out(self, ids: list[Identifier]) -> MarkResult:
        response = self._request(
            "POST",
            "/api/admin/approved/mark-reached-out",
            "Failed to mark",
            json=MarkReachedOutRequest(ids=ids).model_dump(),
        )
        return MarkResult.model_validate(json_body(response) or {})

    def generate_email(self, member_id: Identifier) -> GeneratedEmail:
        response = self._request(
            "POST",
            "/api/admin/email/generate",
            "Failed to generate email",
            json=EmailGenerateRequest(member_id=member_id).model_dump(),
        )
        return GeneratedEmail.model_validate(json_body(response))

    # Attempts / search

    def attempts(
        self,
        page: int = 1,
        per_page: int = APPROVED_PER_PAGE,
        passed: bool | None = None,
        callsign: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> AttemptPage:
        params: dict[str, object] = {"page": page, "per_page": per_page}
        if passed is not None:
            params["passed"] = _flag(passed)
        if callsign:
            params["callsign"] = callsign
        if date_from:
            params["date_from"] = date_from
        if date_to:
            params["date_to"] = date_to
        response = self._request(
            "GET", "/api/admin/attempts", "Failed to fetch attempts", params=params
        )
        return AttemptPage.model_validate(json_body(response) or {})

    def search(self, query: str) -> list[Attempt]:
        response = self._request(
            "GET", "/api/admin/search", "Search failed", params={"q": query}
        )
        return [Attempt.model_validate(item) for item in json_body(response) or []]

    # Tests / questions

    def tests(self) -> list[Test]:
        response = self._request("GET", "/api/admin/tests", "Failed to fetch tests")
        return [Test.model_validate(item) for item in json_body(response) or []]

    def update_test(self, test_id: Identifier, update: TestUpdate) -> None:
        # Only top-level unset fields are omitted; a segment's null end_time is meaningful.
        body: dict[str, object] = {}
        if update.active is not None:
            body["active"] = update.active
        if update.segments is not None:
            body["segments"] = [seg.model_dump() for seg in update.segments]
        self._request(
            "PUT",
            f"/api/admin/tests/{_segment(test_id)}",
            "Failed to update test",
            json=body,
        )

    def questions(self, test_id: Identifier) -> list[AdminQuestion]:
        response = self._request(
            "GET",
            f"/api/admin/tests/{_segment(test_id)}/questions",
            "Failed to fetch questions",
        )
        return [AdminQuestion.model_validate(item) for item in json_body(response) or []]

    def create_question(self, test_id: Identifier, question: QuestionInput) -> None:
        self._request(
            "POST",
            f"/api/admin/tests/{_segment(test_id)}/questions",
            "Failed to create question",
            json=question.model_dump(),
        )

    def update_question(self, question_id: Identifier, question: QuestionInput) -> None:
        self._request(
            "PUT",
            f"/api/admin/questions/{_segment(question_id)}",
            "Failed to update question",
            json=question.model_dump(),
        )

    def delete_question(self, question_id: Identifier) -> None:
        self._request(
            "DELETE",
            f"/api/admin/questions/{_segment(question_id)}",
            "Failed to delete question",
        )

    # Settings

    def settings(self) -> Settings:
        response = self._request("GET", "/api/admin/settings", "Failed to fetch settings")
        return Settings.model_validate(json_body(response) or {})

    def email_template(self) -> EmailTemplate:
        response = self._request(
            "GET", "/api/admin/settings/email-template", "Failed to fetch template"
        )
        return EmailTemplate.model_validate(json_body(response) or {})

    def save_email_template(self, template: EmailTemplate) -> None:
        self._request(
            "PUT",
            "/api/admin/settings/email-template",
            "Failed to save template",
            json=template.model_dump(),
        )
