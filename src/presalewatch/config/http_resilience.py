"""Per-service HTTP client settings: timeouts, retries, pacing and caching."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

# POST is left out: a retried sendMessage or values:append would duplicate rows
_IDEMPOTENT_METHODS = frozenset({"DELETE", "GET", "HEAD", "OPTIONS", "PUT"})
_TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    attempts: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    jitter: float = 1.0
    respect_retry_after: bool = True
    methods: frozenset[str] = _IDEMPOTENT_METHODS
    statuses: frozenset[int] = _TRANSIENT_STATUSES
    exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float = 1.0


@dataclass(slots=True, frozen=True)
class ResponseCache:
    """In-process cache of successful responses, dropped when the client closes."""

    ttl_seconds: float
    refresh_on_access: bool = False


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: ResponseCache | None = None
    headers: Mapping[str, str] = field(default_factory=dict[str, str])
