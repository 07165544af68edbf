"""httpx client wrapper adding retries, client-side rate limiting and a response cache."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Self, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from collections.abc import Mapping

    from presalewatch.config.http_resilience import ResilienceConfig, RetryPolicy

log = getLogger(__name__)

__all__ = ["RequestOptions", "ResilientClient", "build_retry"]


class RequestOptions(TypedDict, total=False):
    """The subset of ``httpx`` request arguments the adapters pass through."""

    headers: Mapping[str, str]
    params: Mapping[str, str]
    json: object
    content: str | bytes
    data: Mapping[str, str]
    files: Mapping[str, tuple[str, bytes, str]]


class _ClientOptions(TypedDict, total=False):
    base_url: str
    timeout: float
    headers: dict[str, str]
    transport: httpx.AsyncBaseTransport


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.attempts,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        backoff_jitter=policy.jitter,
        respect_retry_after_header=policy.respect_retry_after,
        allowed_methods=tuple(policy.methods),
        status_forcelist=tuple(policy.statuses),
        retry_on_exceptions=policy.exceptions,
    )


def _build_client(config: ResilienceConfig) -> httpx.AsyncClient:
    options: _ClientOptions = {
        "timeout": config.timeout_seconds,
        "transport": RetryTransport(retry=build_retry(config.retry)),
        "headers": dict(config.headers),
    }
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.cache is None:
        return httpx.AsyncClient(**options)

    log.debug("Caching %s responses for %.0fs", config.name, config.cache.ttl_seconds)
    storage = AsyncSqliteStorage(
        database_path=":memory:",
        default_ttl=config.cache.ttl_seconds,
        refresh_ttl_on_access=config.cache.refresh_on_access,
    )
    return AsyncCacheClient(**options, storage=storage)


class ResilientClient:
    """One ``httpx.AsyncClient`` per external service.

    Retries run inside the transport, so the rate limiter is entered once per
    logical request however many attempts it takes.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        limit = config.ratelimit
        self._limiter = AsyncLimiter(limit.max_calls, limit.per_seconds) if limit else None
        self._client = _build_client(config)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        **options: Unpack[RequestOptions],
    ) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(method, url, **options)
        async with self._limiter:
            return await self._client.request(method, url, **options)

    async def post(self, url: str, **options: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("POST", url, **options)
