"""Failure kinds raised by the rainfall API transport and the dashboard controller."""

from __future__ import annotations

from typing import Optional


class RainfallApiError(Exception):
    """Base class for every failure talking to the rainfall records API."""


class NetworkUnreachable(RainfallApiError):
    """The request never produced an HTTP response (refused, DNS, timeout)."""

    def __init__(self, message: str, reason: str = "network") -> None:
        super().__init__(message)
        self.reason = reason


class RequestTimedOut(NetworkUnreachable):
    """The request exceeded the configured timeout."""

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        super().__init__(message, reason="timeout")
        self.timeout = timeout


class HttpError(RainfallApiError):
    """The API answered with a status outside the success range."""

    def __init__(self, status_code: int, body: Optional[str] = None) -> None:
        detail = f": {body}" if body else ""
        super().__init__(f"HTTP error {status_code}{detail}")
        self.status_code = status_code
        self.body = body


class MalformedResponse(RainfallApiError):
    """Success status, but the body lacks the expected records collection."""


class DateParseError(ValueError):
    """A record's ``date`` could not be read as a calendar date."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unparseable record date: {value!r}")
        self.value = value


class ConnectivityRequired(RuntimeError):
    """A data fetch was requested while the API is not known to be reachable."""

    def __init__(self, state: str) -> None:
        super().__init__(f"Rainfall API is not connected (state={state}).")
        self.state = state
