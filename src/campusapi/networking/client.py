"""Synchronous HTTP client for the campus administration API.

Every outbound call goes through ApiClient, which enforces a per-attempt
timeout, retries transient failures with exponential backoff, and turns
every failure into an ApiError before it reaches the caller.
"""

from __future__ import annotations

import json
import logging
import math
import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from time import sleep
from typing import Any, Mapping

import requests

from .config import HttpClientConfig, RequestConfig, ResolvedRequest
from .errors import (
    ApiError,
    AttemptRecord,
    HttpStatusError,
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
)

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


def _parse_retry_after(value: str | None) -> float | None:
    """Return Retry-After as seconds, or None when absent, a date or junk."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds):
        return None
    return max(0.0, seconds)


def _close_late_response(future: Future) -> None:
    """Release the connection of an attempt abandoned after its timeout."""
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


class ApiClient:
    """Resilient request client (sync).

    The client holds only immutable configuration and a requests.Session;
    each call is independent and never cached.
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        """Create a new ApiClient.

        Args:
            config: Base URL, default timeout/retry settings and headers.
            session: Optional pre-built session (e.g. with adapters mounted).
                It is not modified; the configured user agent is sent per
                request.
        """
        self._config = config or HttpClientConfig()
        self._session = session or requests.Session()

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def _url(self, endpoint: str) -> str:
        return f"{self._config.base_url}{endpoint}"

    def _should_retry(self, error: ApiError) -> bool:
        """Return True when another attempt may succeed."""
        if isinstance(error, RequestCancelledError):
            return False
        if error.is_client_error:
            return error.status in self._config.retryable_statuses
        return True

    def _backoff_seconds(
        self, attempt_index: int, resolved: ResolvedRequest, error: ApiError
    ) -> float:
        """Delay before the attempt following ``attempt_index`` (0-based)."""
        if (
            self._config.honor_retry_after
            and isinstance(error, HttpStatusError)
            and error.retry_after is not None
        ):
            cap = self._config.max_retry_after_ms / 1000.0
            return min(error.retry_after, cap)
        delay = resolved.retry_base_delay_ms * (2**attempt_index) / 1000.0
        if self._config.jitter:
            return random.uniform(0, delay)
        return delay

    @staticmethod
    def _wait(seconds: float, cancel: threading.Event | None) -> None:
        if cancel is None:
            sleep(seconds)
            return
        if cancel.wait(seconds):
            raise RequestCancelledError()

    @staticmethod
    def _status_error(response: requests.Response) -> HttpStatusError:
        """Normalize a non-2xx response into an HttpStatusError."""
        status = response.status_code
        try:
            details = response.json()
        except ValueError:
            message = response.reason or f"HTTP {status}"
            details = None
        else:
            message = None
            if isinstance(details, Mapping):
                message = details.get("message")
            if not message:
                message = f"HTTP {status}"
        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
        return HttpStatusError(
            str(message),
            status=status,
            details=details,
            retry_after=retry_after,
        )

    def _handle_response(self, response: requests.Response) -> Any:
        if not 200 <= response.status_code < 300:
            raise self._status_error(response)

        content_type = response.headers.get("content-type") or ""
        if "application/json" not in content_type:
            return response.text
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON response: {exc}") from exc

    def _attempt(
        self,
        method: str,
        url: str,
        *,
        data: str | None,
        resolved: ResolvedRequest,
        params: Mapping[str, str] | None,
    ) -> Any:
        """Run one attempt and return its decoded body or raise ApiError.

        The call runs on a worker thread and the attempt gives up once
        ``timeout_ms`` has elapsed in total. The socket timeout is still
        passed to requests so an abandoned worker stops on a stalled read.
        """
        timeout = resolved.timeout_ms / 1000.0
        executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="campusapi-attempt"
        )
        future = executor.submit(
            self._session.request,
            method,
            url,
            headers=dict(resolved.headers),
            params=params,
            data=data,
            timeout=timeout,
            verify=self._config.verify_tls,
        )
        try:
            response = future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            future.add_done_callback(_close_late_response)
            raise RequestTimeoutError() from exc
        except requests.exceptions.Timeout as exc:
            raise RequestTimeoutError() from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        finally:
            executor.shutdown(wait=False)

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return self._handle_response(response)

    def request(
        self,
        method: str,
        endpoint: str,
        body: Any | None = None,
        config: RequestConfig | None = None,
    ) -> Any:
        """Execute one logical request with timeout and retry policy.

        Args:
            method: One of GET, POST, PUT, PATCH, DELETE.
            endpoint: Path appended verbatim to the configured base URL.
            body: Optional JSON-serializable payload.
            config: Optional per-call overrides.

        Returns:
            Decoded JSON for JSON responses, text otherwise.

        Raises:
            ApiError: Once the retry policy gives up.
            ValueError: For an unsupported method or invalid overrides.
            TypeError: When ``body`` is not JSON-serializable.
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported method: {method}")
        config = config or RequestConfig()
        resolved = config.resolve(self._config)
        data = json.dumps(body) if body is not None else None
        url = self._url(endpoint)

        history: list[AttemptRecord] = []
        max_attempts = resolved.max_retries + 1
        for attempt_index in range(max_attempts):
            if config.cancel is not None and config.cancel.is_set():
                error: ApiError = RequestCancelledError()
                error.attempts = tuple(history)
                raise error
            logger.debug(
                "%s %s attempt %d/%d",
                method,
                url,
                attempt_index + 1,
                max_attempts,
            )
            try:
                return self._attempt(
                    method,
                    url,
                    data=data,
                    resolved=resolved,
                    params=config.params,
                )
            except ApiError as exc:
                history.append(
                    AttemptRecord(
                        attempt=attempt_index + 1,
                        message=exc.message,
                        status=exc.status,
                    )
                )
                exc.attempts = tuple(history)
                is_last = attempt_index + 1 >= max_attempts
                if is_last or not self._should_retry(exc):
                    raise
                delay = self._backoff_seconds(attempt_index, resolved, exc)
                logger.warning(
                    "%s %s failed (%s); retrying in %.3fs",
                    method,
                    url,
                    exc.message,
                    delay,
                )

            try:
                self._wait(delay, config.cancel)
            except RequestCancelledError as cancelled:
                cancelled.attempts = tuple(history)
                raise

        # Unreachable: the final attempt either returns or raises.
        raise AssertionError("retry loop exited without a result")

    def get(self, endpoint: str, config: RequestConfig | None = None) -> Any:
        """Perform an HTTP GET request."""
        return self.request("GET", endpoint, config=config)

    def post(
        self,
        endpoint: str,
        body: Any | None = None,
        config: RequestConfig | None = None,
    ) -> Any:
        """Perform an HTTP POST request with an optional JSON body."""
        return self.request("POST", endpoint, body, config)

    def put(
        self,
        endpoint: str,
        body: Any | None = None,
        config: RequestConfig | None = None,
    ) -> Any:
        """Perform an HTTP PUT request with an optional JSON body."""
        return self.request("PUT", endpoint, body, config)

    def patch(
        self,
        endpoint: str,
        body: Any | None = None,
        config: RequestConfig | None = None,
    ) -> Any:
        """Perform an HTTP PATCH request with an optional JSON body."""
        return self.request("PATCH", endpoint, body, config)

    def delete(self, endpoint: str, config: RequestConfig | None = None) -> Any:
        """Perform an HTTP DELETE request."""
        return self.request("DELETE", endpoint, config=config)
