"""JSON API fetcher backed by the resilient HTTP client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from presalewatch.domain.errors import FetchError

if TYPE_CHECKING:
    from presalewatch.domain.model import JsonEndpoint

    from .http_resilience import RequestOptions, ResilientClient

log = getLogger(__name__)

_BODY_METHODS = frozenset({"POST", "PUT"})


class HttpJsonFetcher:
    """Fetch project JSON endpoints; every failure surfaces as ``FetchError``."""

    def __init__(self, client: ResilientClient) -> None:
        self._client = client

    async def fetch(self, endpoint: JsonEndpoint) -> object:
        options: RequestOptions = {
            "headers": {"Content-Type": "application/json", **endpoint.headers},
        }
        if endpoint.body is not None and endpoint.method in _BODY_METHODS:
            if isinstance(endpoint.body, str):
                options["content"] = endpoint.body
            else:
                options["json"] = endpoint.body

        log.info("Fetching JSON from %s %s", endpoint.method, endpoint.endpoint)
        try:
            response = await self._client.request(endpoint.method, endpoint.endpoint, **options)
        except httpx.HTTPError as exc:
            raise FetchError(f"{endpoint.endpoint}: {exc}") from exc

        if not response.is_success:
            raise FetchError(
                f"{endpoint.endpoint}: HTTP {response.status_code} {response.reason_phrase}"
            )
        try:
            document = response.json()
        except ValueError as exc:
            raise FetchError(f"{endpoint.endpoint}: response is not JSON") from exc
        log.debug("JSON response from %s: %s", endpoint.endpoint, document)
        return document
