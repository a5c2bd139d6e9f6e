import json as jsonlib
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from urllib.parse import urlsplit

import pytest
from jose import jwt

from knowcode.client import AdminClient, AdminSession, PublicClient, Transport

API_URL = "http://exam-api.test"


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = "" if payload is None else jsonlib.dumps(payload)
        self.text = text

    def json(self):
        if self._payload is None:
            return jsonlib.loads(self.text)
        return self._payload


@dataclass
class Call:
    method: str
    path: str
    params: dict | None
    json: object
    headers: dict | None


class FakeSession:
    """Stands in for ``requests.Session``; responses are keyed by (method, path).

    A list value is consumed one response per call; a callable gets the
    recorded call and returns a response.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls: list[Call] = []

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        call = Call(method, urlsplit(url).path, params, json, headers)
        self.calls.append(call)
        handler = self.routes.get((method, call.path))
        if handler is None:
            return FakeResponse(404, text="Not found")
        if isinstance(handler, list):
            return handler.pop(0)
        if callable(handler):
            return handler(call)
        return handler

    def paths(self, method: str | None = None) -> list[str]:
        return [c.path for c in self.calls if method is None or c.method == method]


def make_token(minutes: int = 60) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode({"sub": "admin", "exp": int(exp.timestamp())}, "secret", algorithm="HS256")


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def transport(fake_session: FakeSession) -> Transport:
    return Transport(base_url=API_URL, session=fake_session)


@pytest.fixture
def public_client(transport: Transport) -> PublicClient:
    return PublicClient(transport)


@pytest.fixture
def admin_session() -> AdminSession:
    return AdminSession(token=make_token())


@pytest.fixture
def admin_client(admin_session: AdminSession, transport: Transport) -> AdminClient:
    return AdminClient(admin_session, transport)
