"""HTTP transport shared by the public and admin clients."""
from __future__ import annotations

import logging
from typing import Any

import requests

from knowcode.client.errors import ApiError
from knowcode.config import API_BASE_URL, HTTP_TIMEOUT_SECONDS

log = logging.getLogger(__name__)


def is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def error_message(response: requests.Response, fallback: str) -> str:
    """Raw body text of a failed response, or ``fallback`` when it is empty."""
    text = (response.text or "").strip()
    return text or fallback


def raise_for_api_error(response: requests.Response, fallback: str) -> None:
    """Raise :class:`ApiError` for any non-2xx response."""
    if is_success(response):
        return
    raise ApiError(response.status_code, error_message(response, fallback))


def json_body(response: requests.Response) -> Any:
    """Decode a JSON body; empty bodies decode to ``None``."""
    if not (response.text or "").strip():
        return None
    return response.json()


class Transport:
    """A ``requests.Session`` bound to the exam API base URL."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        session: requests.Session | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def request(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        params: dict[str, object] | None = None,
        json: object | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """Send one request. Transport failures become ``ApiError(None, fallback)``."""
        try:
            return self.session.request(
                method,
                self.url(path),
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(None, fallback) from exc
