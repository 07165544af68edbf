"""OpenAI configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var, require_env_var

DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_OPENAI_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class OpenAIConfig:
    """Holds credentials and model selection for the extractor."""

    api_key: str
    model: str = DEFAULT_OPENAI_MODEL
    timeout_seconds: float = DEFAULT_OPENAI_TIMEOUT_SECONDS
    max_tokens: int = 1000


def get_openai_config() -> OpenAIConfig:
    return OpenAIConfig(
        api_key=require_env_var("OPENAI_API_KEY"),
        model=optional_env_var("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        timeout_seconds=env_float(
            "OPENAI_TIMEOUT_SECONDS",
            default=DEFAULT_OPENAI_TIMEOUT_SECONDS,
            minimum=1.0,
        ),
    )
