from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from presalewatch.adapters.json_api import HttpJsonFetcher
from presalewatch.domain.errors import FetchError
from presalewatch.domain.model import JsonEndpoint
from tests.helpers.http import mock_client


def test_get_returns_parsed_document() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"price": 0.01})

    fetcher = HttpJsonFetcher(mock_client(handler))
    endpoint = JsonEndpoint(
        endpoint="https://api.example/stats",
        headers={"X-Api-Key": "k"},
        body={"ignored": True},
    )

    document = asyncio.run(fetcher.fetch(endpoint))

    assert document == {"price": 0.01}
    assert seen[0].method == "GET"
    assert seen[0].headers["X-Api-Key"] == "k"
    assert seen[0].headers["Content-Type"] == "application/json"
    assert seen[0].content == b""


def test_post_sends_json_body() -> None:
    bodies: list[object] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=[1, 2])

    fetcher = HttpJsonFetcher(mock_client(handler))
    endpoint = JsonEndpoint(
        endpoint="https://api.example/rpc",
        method="POST",
        body={"method": "stage"},
    )

    assert asyncio.run(fetcher.fetch(endpoint)) == [1, 2]
    assert bodies == [{"method": "stage"}]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"error": "missing"}),
        httpx.Response(200, text="<html>maintenance</html>"),
    ],
)
def test_bad_responses_raise_fetch_error(response: httpx.Response) -> None:
    fetcher = HttpJsonFetcher(mock_client(lambda _: response))

    with pytest.raises(FetchError):
        asyncio.run(fetcher.fetch(JsonEndpoint(endpoint="https://api.example/stats")))


def test_transport_error_raises_fetch_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    fetcher = HttpJsonFetcher(mock_client(handler))

    with pytest.raises(FetchError, match="refused"):
        asyncio.run(fetcher.fetch(JsonEndpoint(endpoint="https://api.example/stats")))
