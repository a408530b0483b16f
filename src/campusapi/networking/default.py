"""Process-wide default ApiClient and the API health probe."""

from __future__ import annotations

import logging
import threading

from .client import ApiClient
from .config import HttpClientConfig, RequestConfig
from .errors import ApiError

logger = logging.getLogger(__name__)

HEALTH_ENDPOINT = "/health"

_default_client: ApiClient | None = None
_lock = threading.Lock()


def get_default_client() -> ApiClient:
    """Return the shared client, building it from the environment once."""
    global _default_client
    with _lock:
        if _default_client is None:
            _default_client = ApiClient(HttpClientConfig.from_env())
        return _default_client


def reset_default_client() -> None:
    """Close and forget the shared client."""
    global _default_client
    with _lock:
        if _default_client is not None:
            _default_client.close()
        _default_client = None


def check_api_health(client: ApiClient | None = None) -> bool:
    """Return True when ``GET /health`` succeeds."""
    client = client or get_default_client()
    try:
        client.get(
            HEALTH_ENDPOINT, RequestConfig(timeout_ms=5000, max_retries=1)
        )
    except ApiError as exc:
        logger.info("API health check failed: %s", exc.message)
        return False
    return True
