"""Telegram notifier configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig

TELEGRAM_BASE_URL = "https://api.telegram.org/"
TELEGRAM_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class TelegramConfig:
    bot_token: str
    chat_id: str
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(
            name="telegram",
            base_url=TELEGRAM_BASE_URL,
            timeout_seconds=TELEGRAM_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=1),
        )
    )


def get_telegram_config() -> TelegramConfig | None:
    """Return the notifier configuration, or ``None`` when reporting is disabled."""

    token = optional_env_var("TELEGRAM_BOT_TOKEN")
    chat_id = optional_env_var("TELEGRAM_CHAT_ID")
    if token is None or chat_id is None:
        return None
    return TelegramConfig(bot_token=token, chat_id=chat_id)
