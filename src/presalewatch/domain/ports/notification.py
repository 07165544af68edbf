"""Ports for pushing run reports."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Best-effort report sink; implementations log failures and return ``False``."""

    async def send_text(self, channel: str, text: str) -> bool: ...

    async def send_image(self, channel: str, image: bytes, caption: str | None = None) -> bool: ...


__all__ = ["Notifier"]
