"""Errors raised by the remote API clients."""

from typing import Any


class RemoteApiError(Exception):
    """A remote API call failed.

    ``status`` is the HTTP status of the failed response, or ``None`` when the
    call never produced one (timeout, connection failure).
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class PartialRemoteError(Exception):
    """A GraphQL call returned an ``errors`` array alongside usable data."""

    def __init__(self, errors: list[dict[str, Any]], data: dict[str, Any]):
        messages = "; ".join(str(error.get("message", error)) for error in errors)
        super().__init__(f"GraphQL returned partial data: {messages}")
        self.errors = errors
        self.data = data
