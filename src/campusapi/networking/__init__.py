"""Networking layer: resilient request client and error helpers."""

from .client import ApiClient
from .config import HttpClientConfig, RequestConfig
from .default import check_api_health, get_default_client
from .errors import (
    ApiError,
    AttemptRecord,
    HttpStatusError,
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
)
from .presentation import ErrorDescription, describe_error
from .request_state import ApiRequest

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiRequest",
    "AttemptRecord",
    "ErrorDescription",
    "HttpClientConfig",
    "HttpStatusError",
    "RequestCancelledError",
    "RequestConfig",
    "RequestTimeoutError",
    "TransportError",
    "check_api_health",
    "describe_error",
    "get_default_client",
]
