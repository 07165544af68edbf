"""Application configuration helpers."""

from __future__ import annotations

from .batch import BatchConfig, get_batch_config
from .browser import BrowserConfig, get_browser_config
from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, ResponseCache, RetryPolicy
from .json_api import get_json_api_resilience
from .logging import configure_logging
from .openai import OpenAIConfig, get_openai_config
from .sheets import ServiceAccountInfo, SheetsConfig, get_sheets_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .telegram import TelegramConfig, get_telegram_config

__all__ = [
    "BatchConfig",
    "BrowserConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "OpenAIConfig",
    "RateLimit",
    "ResilienceConfig",
    "ResponseCache",
    "RetryPolicy",
    "ServiceAccountInfo",
    "SheetsConfig",
    "StorageConfig",
    "TelegramConfig",
    "configure_logging",
    "get_batch_config",
    "get_browser_config",
    "get_database_config",
    "get_json_api_resilience",
    "get_openai_config",
    "get_sheets_config",
    "get_storage_config",
    "get_telegram_config",
    "require_env_vars",
]
