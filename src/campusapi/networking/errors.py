"""Normalized error types raised by ApiClient.

Every failure leaving the client is an ApiError. Subclasses only refine
the kind of failure; they all expose ``message``, ``status``, ``details``
and ``attempts``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

TIMEOUT_MESSAGE = "Request timeout"


@dataclass(frozen=True)
class AttemptRecord:
    """Outcome of one failed attempt."""

    attempt: int
    message: str
    status: int | None = None


class ApiError(Exception):
    """Base error for all request failures."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details
        self.attempts: tuple[AttemptRecord, ...] = ()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"status={self.status!r})"
        )

    @property
    def is_client_error(self) -> bool:
        return self.status is not None and 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status is not None and self.status >= 500


class RequestTimeoutError(ApiError):
    """No response arrived within the per-attempt timeout."""

    def __init__(self, message: str = TIMEOUT_MESSAGE) -> None:
        super().__init__(message)


class TransportError(ApiError):
    """DNS, connection or other transport failure with no response."""


class RequestCancelledError(ApiError):
    """The caller cancelled the request."""

    def __init__(self, message: str = "Request cancelled") -> None:
        super().__init__(message)


class HttpStatusError(ApiError):
    """The server answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        details: Any | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, status=status, details=details)
        self.retry_after = retry_after
