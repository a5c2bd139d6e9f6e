import pytest
from fastapi.testclient import TestClient

from knowcode.app import app
from knowcode.dependencies.sessions import get_transport

from conftest import FakeResponse, make_token

TESTS = [
    {
        "id": 1,
        "title": "1991 Extra Class",
        "speed_wpm": 20,
        "audio_url": "/audio/1991.mp3",
        "segments": [{"name": "test", "start_time": 0, "end_time": None, "enables_copy": True, "enables_questions": True}],
    }
]
QUESTIONS = [
    {"id": 11, "question_number": 1, "question_text": "Who sent?", "option_a": "W1AW", "option_b": "K6XX", "option_c": "N0CALL", "option_d": "AA1A"},
]


@pytest.fixture
def client(transport, fake_session):
    fake_session.routes.update(
        {
            ("GET", "/api/tests"): FakeResponse(payload=TESTS),
            ("GET", "/api/tests/1/questions"): FakeResponse(payload=QUESTIONS),
            ("GET", "/api/admin/stats"): FakeResponse(payload={"pending_count": 3}),
        }
    )
    app.dependency_overrides[get_transport] = lambda: transport
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_exam_flow_to_test_view(client) -> None:
    created = client.post("/exam/sessions")
    assert created.status_code == 201
    sid = created.json()["session_id"]
    assert created.json()["view"] == "home"

    selected = client.post(f"/exam/sessions/{sid}/begin").json()
    assert selected["view"] == "select"
    assert [t["id"] for t in selected["tests"]] == [1]

    missing = client.post(f"/exam/sessions/{sid}/start", json={"test_id": 1})
    assert missing.status_code == 400

    client.put(f"/exam/sessions/{sid}/callsign", json={"callsign": "w6jsv"})
    modal = client.post(f"/exam/sessions/{sid}/start", json={"test_id": 1}).json()
    assert modal["modal"] is not None

    view = client.post(f"/exam/sessions/{sid}/modal/confirm").json()
    assert view["view"] == "test"
    assert [q["id"] for q in view["questions"]] == [11]
    assert view["can_submit"] is False

    assert client.delete(f"/exam/sessions/{sid}").status_code == 204
    assert client.get(f"/exam/sessions/{sid}").status_code == 404


def test_unknown_exam_session(client) -> None:
    assert client.get("/exam/sessions/nope").status_code == 404


def _login(client, fake_session) -> dict:
    fake_session.routes[("POST", "/api/admin/login")] = FakeResponse(payload={"token": make_token()})
    response = client.post("/admin/login", json={"username": "admin", "password": "pw"})
    assert response.status_code == 200
    return response.json()


def test_admin_login_and_view(client, fake_session) -> None:
    body = _login(client, fake_session)
    assert body["view"]["page"] == "dashboard"
    assert body["view"]["dashboard"]["cards"][0]["value"] == 3

    headers = {"Authorization": f"Bearer {body['token']}"}
    assert client.get("/admin/view", headers=headers).json()["page"] == "dashboard"

    wrong_page = client.post("/admin/queue/refresh", headers=headers)
    assert wrong_page.status_code == 409

    unknown = client.post("/admin/navigate", json={"page": "reports"}, headers=headers)
    assert unknown.status_code == 400

    assert client.post("/admin/logout", headers=headers).status_code == 204
    assert client.get("/admin/view", headers=headers).status_code == 401


def test_admin_login_rejected(client, fake_session) -> None:
    fake_session.routes[("POST", "/api/admin/login")] = FakeResponse(401, text="Invalid credentials")
    response = client.post("/admin/login", json={"username": "admin", "password": "bad"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_upstream_401_logs_portal_out(client, fake_session) -> None:
    body = _login(client, fake_session)
    headers = {"Authorization": f"Bearer {body['token']}"}
    fake_session.routes[("GET", "/api/admin/queue")] = FakeResponse(401, text="")

    response = client.post("/admin/navigate", json={"page": "queue"}, headers=headers)

    assert response.status_code == 401
    assert client.get("/admin/view", headers=headers).status_code == 401


def test_admin_requires_bearer(client) -> None:
    response = client.get("/admin/view")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"
