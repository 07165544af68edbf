"""Headless browser configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import env_flag, env_int, optional_env_var

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_VIEWPORT = (1920, 1080)


@dataclass(frozen=True, slots=True)
class BrowserConfig:
    headless: bool = True
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    viewport: tuple[int, int] = DEFAULT_VIEWPORT
    screenshots_dir: Path | None = None


def get_browser_config() -> BrowserConfig:
    screenshots_dir = optional_env_var("SCREENSHOTS_DIR")
    return BrowserConfig(
        headless=env_flag("BROWSER_HEADLESS", default=True),
        timeout_ms=env_int("BROWSER_TIMEOUT", default=DEFAULT_TIMEOUT_MS, minimum=1),
        screenshots_dir=Path(screenshots_dir) if screenshots_dir else None,
    )
