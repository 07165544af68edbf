"""Telegram Bot API notifier."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

if TYPE_CHECKING:
    from .http_resilience import RequestOptions, ResilientClient

log = getLogger(__name__)


class TelegramResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ok: bool
    description: str | None = None


class TelegramNotifier:
    """Send HTML reports through a bot; delivery problems are logged, never raised."""

    def __init__(self, client: ResilientClient, *, bot_token: str) -> None:
        self._client = client
        self._bot_token = bot_token

    async def send_text(self, channel: str, text: str) -> bool:
        return await self._call(
            "sendMessage",
            json={
                "chat_id": channel,
                "text": text,
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            },
        )

    async def send_image(self, channel: str, image: bytes, caption: str | None = None) -> bool:
        data = {"chat_id": channel, "parse_mode": "HTML"}
        if caption:
            data["caption"] = caption
        if await self._call(
            "sendPhoto",
            data=data,
            files={"photo": ("capture.png", image, "image/png")},
        ):
            return True
        log.info("sendPhoto rejected, retrying as document")
        return await self._call(
            "sendDocument",
            data=data,
            files={"document": ("capture.png", image, "image/png")},
        )

    async def _call(self, method: str, **options: object) -> bool:
        request: RequestOptions = options  # type: ignore[assignment]
        try:
            # leading slash: the token's colon must not parse as a URL scheme
            response = await self._client.post(f"/bot{self._bot_token}/{method}", **request)
        except httpx.HTTPError as exc:
            log.warning("Telegram %s failed: %s", method, exc)
            return False
        try:
            payload = TelegramResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            log.warning("Telegram %s returned HTTP %s", method, response.status_code)
            return False
        if not payload.ok:
            log.warning("Telegram %s rejected: %s", method, payload.description)
            return False
        return True
