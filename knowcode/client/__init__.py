"""Clients for the Know Code Extra exam API."""
from knowcode.client.admin import AdminClient, login
from knowcode.client.errors import ApiError, SessionExpired, SubmissionBlocked
from knowcode.client.http import Transport
from knowcode.client.public import PublicClient
from knowcode.client.session import AdminSession

__all__ = [
    "AdminClient",
    "AdminSession",
    "ApiError",
    "PublicClient",
    "SessionExpired",
    "SubmissionBlocked",
    "Transport",
    "login",
]
