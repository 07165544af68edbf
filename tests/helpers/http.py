"""ResilientClient instances wired to an in-process handler."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from presalewatch.adapters.http_resilience import ResilientClient
from presalewatch.config.http_resilience import ResilienceConfig

if TYPE_CHECKING:
    from collections.abc import Callable


def mock_client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    base_url: str = "",
) -> ResilientClient:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    client = ResilientClient(ResilienceConfig(name="test", base_url=base_url or None))
    client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        base_url=base_url,
        transport=httpx.MockTransport(async_handler),
    )
    return client
