from datetime import datetime, timezone

import pytest
import requests

from knowcode import models
from knowcode.client import AdminClient, AdminSession, ApiError, SessionExpired, SubmissionBlocked, login
from knowcode.client.session import token_expiry

from conftest import FakeResponse, FakeSession, make_token


def test_submit_400_raises_blocked_with_body(public_client, fake_session) -> None:
    fake_session.routes[("POST", "/api/tests/1/submit")] = FakeResponse(
        400, text="You already have a passed attempt awaiting verification"
    )
    submission = models.Submission(callsign="W6JSV", answers={"1": "A"})
    with pytest.raises(SubmissionBlocked) as excinfo:
        public_client.submit(1, submission)
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "You already have a passed attempt awaiting verification"


def test_submit_other_error_uses_body_or_fallback(public_client, fake_session) -> None:
    fake_session.routes[("POST", "/api/tests/1/submit")] = [
        FakeResponse(500, text="database locked"),
        FakeResponse(503, text=""),
    ]
    submission = models.Submission(callsign="W6JSV")
    with pytest.raises(ApiError) as first:
        public_client.submit(1, submission)
    assert not isinstance(first.value, SubmissionBlocked)
    assert first.value.message == "database locked"
    with pytest.raises(ApiError) as second:
        public_client.submit(1, submission)
    assert second.value.message == "Failed to submit test"


def test_transport_failure_becomes_api_error(public_client, fake_session) -> None:
    def boom(call):
        raise requests.ConnectionError("refused")

    fake_session.routes[("GET", "/api/tests")] = boom
    with pytest.raises(ApiError) as excinfo:
        public_client.list_tests()
    assert excinfo.value.status_code is None
    assert excinfo.value.message == "Failed to fetch tests"


def test_leaderboard_sends_limit(public_client, fake_session) -> None:
    fake_session.routes[("GET", "/api/leaderboard")] = FakeResponse(
        payload=[{"callsign": "W1AW", "highest_speed_passed": 20, "total_attempts": 2, "total_passes": 1}]
    )
    entries = public_client.leaderboard()
    assert entries[0].callsign == "W1AW"
    assert fake_session.calls[0].params == {"limit": 20}


def test_session_expiry_from_jwt_claim() -> None:
    token = make_token(minutes=30)
    session = AdminSession.from_login(models.LoginResponse(token=token, expires_in=10))
    assert session.expires_at == token_expiry(token)
    assert session.is_authenticated()


def test_session_expiry_falls_back_to_expires_in() -> None:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    session = AdminSession.from_login(
        models.LoginResponse(token="opaque", expires_in=3600), now=now
    )
    assert session.expires_at == datetime(2024, 1, 1, 1, tzinfo=timezone.utc)
    assert session.is_expired(datetime(2024, 1, 1, 2, tzinfo=timezone.utc))


def test_admin_calls_send_bearer_token(admin_client, admin_session, fake_session) -> None:
    fake_session.routes[("GET", "/api/admin/stats")] = FakeResponse(payload={"pending_count": 3})
    stats = admin_client.stats()
    assert stats.pending_count == 3
    assert fake_session.calls[0].headers == {"Authorization": f"Bearer {admin_session.token}"}


def test_admin_401_invalidates_session(admin_client, admin_session, fake_session) -> None:
    fake_session.routes[("GET", "/api/admin/queue")] = FakeResponse(401, text="Unauthorized")
    with pytest.raises(SessionExpired) as excinfo:
        admin_client.queue()
    assert excinfo.value.message == "Session expired"
    assert admin_session.token is None
    assert not admin_session.is_authenticated()

    # no further request goes out once the session is gone
    with pytest.raises(SessionExpired):
        admin_client.stats()
    assert fake_session.paths() == ["/api/admin/queue"]


def test_expired_token_is_not_sent(transport, fake_session) -> None:
    session = AdminSession(token=make_token(minutes=-5))
    session.expires_at = token_expiry(session.token)
    client = AdminClient(session, transport)
    with pytest.raises(SessionExpired):
        client.queue()
    assert fake_session.calls == []


def test_login_failure_uses_body(transport, fake_session) -> None:
    fake_session.routes[("POST", "/api/admin/login")] = FakeResponse(401, text="Invalid credentials")
    with pytest.raises(ApiError) as excinfo:
        login("admin", "wrong", transport)
    assert excinfo.value.message == "Invalid credentials"


def test_login_returns_session(transport, fake_session) -> None:
    token = make_token()
    fake_session.routes[("POST", "/api/admin/login")] = FakeResponse(
        payload={"token": token, "expires_in": 86400}
    )
    session = login("admin", "secret", transport)
    assert session.token == token
    assert fake_session.calls[0].json == {"username": "admin", "password": "secret"}


def test_approved_and_attempts_query_params(admin_client, fake_session) -> None:
    fake_session.routes[("GET", "/api/admin/approved")] = FakeResponse(payload={"items": [], "total": 0})
    fake_session.routes[("GET", "/api/admin/attempts")] = FakeResponse(payload={"items": [], "total": 0})

    admin_client.approved(page=2, reached_out=False)
    admin_client.attempts(passed=True, callsign="W1", date_from="2024-01-01")

    assert fake_session.calls[0].params == {"page": 2, "per_page": 25, "reached_out": "false"}
    assert fake_session.calls[1].params == {
        "page": 1,
        "per_page": 25,
        "passed": "true",
        "callsign": "W1",
        "date_from": "2024-01-01",
    }


def test_history_quotes_callsign(admin_client, fake_session) -> None:
    fake_session.routes[("GET", "/api/admin/queue/W1AW%2FP/history")] = FakeResponse(payload=[])
    assert admin_client.history("W1AW/P") == []


def test_update_test_keeps_open_segment_end(admin_client, fake_session) -> None:
    fake_session.routes[("PUT", "/api/admin/tests/7")] = FakeResponse(payload={})
    admin_client.update_test(
        7, models.TestUpdate(segments=[models.Segment(name="test", start_time=30)])
    )
    body = fake_session.calls[0].json
    assert "active" not in body
    assert body["segments"][0]["end_time"] is None
