"""Ports for rendering project pages."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Renderer(Protocol):
    """Produce images (and element text) of live web pages.

    Implementations raise ``RenderError`` when the page or region cannot be
    captured within their configured timeout.
    """

    async def render(self, url: str, region: str | None = None) -> bytes:
        """Capture ``region`` (a CSS selector) of ``url``, or the full page when ``None``."""
        ...

    async def extract_text(self, url: str, selector: str) -> str:
        """Return the trimmed text content of the first element matching ``selector``."""
        ...


__all__ = ["Renderer"]
