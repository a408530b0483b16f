"""Configuration models for the ApiClient interface."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from requests.structures import CaseInsensitiveDict

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY_MS = 1_000
DEFAULT_MAX_RETRY_AFTER_MS = 60_000


def _default_headers() -> Mapping[str, str]:
    """Return immutable JSON default headers mapping."""

    return MappingProxyType({"Content-Type": "application/json"})


def _frozen_headers(
    headers: Mapping[str, str] | None = None,
) -> Mapping[str, str]:
    return MappingProxyType(dict(headers or {}))


def _env_bool(value: str) -> bool:
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class HttpClientConfig:
    """Client-wide defaults for ApiClient.

    Values are immutable after construction; per-call overrides go through
    RequestConfig.
    """

    base_url: str = ""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay_ms: int = DEFAULT_RETRY_BASE_DELAY_MS
    default_headers: Mapping[str, str] = field(default_factory=_default_headers)
    user_agent: str | None = None
    verify_tls: bool = True
    jitter: bool = False
    retryable_statuses: frozenset[int] = frozenset()
    honor_retry_after: bool = False
    max_retry_after_ms: int = DEFAULT_MAX_RETRY_AFTER_MS

    def __post_init__(self) -> None:
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be > 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.retry_base_delay_ms <= 0:
            raise ValueError("retry_base_delay_ms must be > 0")
        if self.max_retry_after_ms <= 0:
            raise ValueError("max_retry_after_ms must be > 0")
        for status in self.retryable_statuses:
            if not 400 <= status < 500:
                raise ValueError(
                    "retryable_statuses may only contain 4xx status codes"
                )

        # Freeze copied inputs to avoid post-init mutation side effects.
        object.__setattr__(
            self, "default_headers", _frozen_headers(self.default_headers)
        )
        object.__setattr__(
            self, "retryable_statuses", frozenset(self.retryable_statuses)
        )

    @classmethod
    def from_env(
        cls,
        prefix: str = "CAMPUSAPI_",
        environ: Mapping[str, str] | None = None,
    ) -> HttpClientConfig:
        """Build a config from environment variables.

        Recognized names (after ``prefix``): BASE_URL, TIMEOUT_MS,
        MAX_RETRIES, RETRY_BASE_DELAY_MS, USER_AGENT, VERIFY_TLS. Missing
        variables keep their defaults.
        """
        env = os.environ if environ is None else environ

        def lookup(name: str) -> str | None:
            return env.get(prefix + name)

        kwargs: dict[str, object] = {}
        if (base_url := lookup("BASE_URL")) is not None:
            kwargs["base_url"] = base_url
        for name, key in (
            ("TIMEOUT_MS", "timeout_ms"),
            ("MAX_RETRIES", "max_retries"),
            ("RETRY_BASE_DELAY_MS", "retry_base_delay_ms"),
        ):
            raw = lookup(name)
            if raw is None:
                continue
            try:
                kwargs[key] = int(raw)
            except ValueError:
                raise ValueError(
                    f"{prefix}{name} must be an integer, got {raw!r}"
                ) from None
        if (user_agent := lookup("USER_AGENT")) is not None:
            kwargs["user_agent"] = user_agent or None
        if (verify_tls := lookup("VERIFY_TLS")) is not None:
            kwargs["verify_tls"] = _env_bool(verify_tls)
        return cls(**kwargs)  # type: ignore[arg-type]


@dataclass(frozen=True)
class ResolvedRequest:
    """Effective per-call settings after overlaying a RequestConfig."""

    timeout_ms: int
    max_retries: int
    retry_base_delay_ms: int
    headers: Mapping[str, str]


@dataclass(frozen=True)
class RequestConfig:
    """Per-call overlay on top of HttpClientConfig.

    ``None`` means "use the client default". ``cancel`` lets the caller
    abort the call between attempts or during a backoff wait.
    """

    timeout_ms: int | None = None
    max_retries: int | None = None
    retry_base_delay_ms: int | None = None
    headers: Mapping[str, str] = field(default_factory=_frozen_headers)
    params: Mapping[str, str] | None = None
    cancel: threading.Event | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _frozen_headers(self.headers))

    def resolve(self, defaults: HttpClientConfig) -> ResolvedRequest:
        """Validate overrides and merge them with client defaults."""
        timeout_ms = (
            defaults.timeout_ms if self.timeout_ms is None else self.timeout_ms
        )
        if timeout_ms <= 0:
            raise ValueError("timeout_ms override must be > 0 when provided")
        max_retries = (
            defaults.max_retries
            if self.max_retries is None
            else self.max_retries
        )
        if max_retries < 0:
            raise ValueError("max_retries override must be >= 0 when provided")
        delay_ms = (
            defaults.retry_base_delay_ms
            if self.retry_base_delay_ms is None
            else self.retry_base_delay_ms
        )
        if delay_ms <= 0:
            raise ValueError(
                "retry_base_delay_ms override must be > 0 when provided"
            )

        headers = CaseInsensitiveDict(defaults.default_headers)
        if defaults.user_agent:
            headers["User-Agent"] = defaults.user_agent
        headers.update(self.headers)
        return ResolvedRequest(
            timeout_ms=timeout_ms,
            max_retries=max_retries,
            retry_base_delay_ms=delay_ms,
            headers=MappingProxyType(dict(headers)),
        )
