"""Ports for polling JSON APIs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from presalewatch.domain.model import JsonEndpoint


@runtime_checkable
class JsonFetcher(Protocol):
    async def fetch(self, endpoint: JsonEndpoint) -> object:
        """Return the decoded JSON document or raise ``FetchError``."""
        ...


__all__ = ["JsonFetcher"]
