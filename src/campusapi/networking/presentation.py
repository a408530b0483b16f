"""Map request failures to user-facing titles and messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import ApiError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Error"
DEFAULT_MESSAGE = "An unexpected error occurred"

_SERVER_ERROR = (
    "Server Error",
    "Something went wrong on our end. Please try again later",
)
_UNAVAILABLE = (
    "Service Unavailable",
    "Service is temporarily unavailable. Please try again later",
)

# None keeps the error's own message.
_STATUS_DESCRIPTIONS: dict[int, tuple[str, str | None]] = {
    400: ("Bad Request", None),
    401: ("Unauthorized", "Please log in to continue"),
    403: ("Forbidden", "You don't have permission to perform this action"),
    404: ("Not Found", "The requested resource was not found"),
    429: ("Too Many Requests", "Please slow down and try again later"),
    500: _SERVER_ERROR,
    502: _UNAVAILABLE,
    503: _UNAVAILABLE,
    504: _UNAVAILABLE,
}


@dataclass(frozen=True)
class ErrorDescription:
    title: str
    message: str
    error: BaseException | str | None = None


def is_network_error(error: object) -> bool:
    return isinstance(error, TransportError)


def is_server_error(error: object) -> bool:
    return isinstance(error, ApiError) and error.is_server_error


def is_client_error(error: object) -> bool:
    return isinstance(error, ApiError) and error.is_client_error


def describe_error(
    error: BaseException | str | None, context: str | None = None
) -> ErrorDescription:
    """Describe ``error`` for display and log it with ``context``."""
    logger.error("API error: %r (context=%s)", error, context)

    title = DEFAULT_TITLE
    message = DEFAULT_MESSAGE
    if isinstance(error, ApiError):
        message = error.message or DEFAULT_MESSAGE
    elif isinstance(error, str):
        message = error
    elif isinstance(error, BaseException) and str(error):
        message = str(error)

    status = getattr(error, "status", None)
    if isinstance(status, int):
        if status in _STATUS_DESCRIPTIONS:
            title, fixed = _STATUS_DESCRIPTIONS[status]
            message = fixed or message
        elif status >= 500:
            title, message = _SERVER_ERROR

    if is_network_error(error):
        title = "Network Error"
        message = "Please check your internet connection and try again"

    return ErrorDescription(title=title, message=message, error=error)
