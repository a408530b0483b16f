"""Stateful request helper tracking data, loading and error for a caller."""

from __future__ import annotations

from typing import Any

from .client import SUPPORTED_METHODS, ApiClient
from .config import RequestConfig
from .default import get_default_client
from .errors import ApiError
from .presentation import describe_error


class ApiRequest:
    """Run requests and keep the outcome of the latest one.

    Failures never propagate: ``execute`` returns None and stores the
    described message in ``error``.
    """

    def __init__(self, client: ApiClient | None = None) -> None:
        self._client = client
        self.data: Any | None = None
        self.loading = False
        self.error: str | None = None

    @property
    def client(self) -> ApiClient:
        return self._client or get_default_client()

    def execute(
        self,
        method: str,
        endpoint: str,
        body: Any | None = None,
        config: RequestConfig | None = None,
    ) -> Any | None:
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported method: {method}")

        self.loading = True
        self.error = None
        try:
            result = self.client.request(method, endpoint, body, config)
        except ApiError as exc:
            description = describe_error(exc, f"{method} {endpoint}")
            self.data = None
            self.error = description.message
            return None
        finally:
            self.loading = False

        self.data = result
        return result

    def get(
        self, endpoint: str, config: RequestConfig | None = None
    ) -> Any | None:
        return self.execute("GET", endpoint, config=config)

    def post(
        self,
        endpoint: str,
        body: Any | None = None,
        config: RequestConfig | None = None,
    ) -> Any | None:
        return self.execute("POST", endpoint, body, config)

    def put(
        self,
        endpoint: str,
        body: Any | None = None,
        config: RequestConfig | None = None,
    ) -> Any | None:
        return self.execute("PUT", endpoint, body, config)

    def patch(
        self,
        endpoint: str,
        body: Any | None = None,
        config: RequestConfig | None = None,
    ) -> Any | None:
        return self.execute("PATCH", endpoint, body, config)

    def delete(
        self, endpoint: str, config: RequestConfig | None = None
    ) -> Any | None:
        return self.execute("DELETE", endpoint, config=config)

    def reset(self) -> None:
        self.data = None
        self.loading = False
        self.error = None
