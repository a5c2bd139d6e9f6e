"""Errors raised by the exam API clients."""


class ApiError(Exception):
    """Non-2xx response (or transport failure) from the exam API.

    ``message`` is the raw response body when the server sent one, otherwise
    the fallback text of the call that failed.
    """

    def __init__(self, status_code: int | None, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class SessionExpired(ApiError):
    """Admin token rejected (401) or already expired; the session is gone."""

    def __init__(self, message: str = "Session expired"):
        super().__init__(401, message)


class SubmissionBlocked(ApiError):
    """400 on submission: the callsign already has a pending/approved attempt."""

    def __init__(self, message: str):
        super().__init__(400, message)
