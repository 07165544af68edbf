"""Shared logging helpers."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError


def _level_from_environment() -> int:
    name = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown LOG_LEVEL: {name}", variable="LOG_LEVEL")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the level
    defaults to ``LOG_LEVEL`` from the environment (INFO when unset) and a terse
    format suitable for CLI output. Pass ``force=True`` to reconfigure during tests
    or specialised entry points.
    """

    logging.basicConfig(
        level=level if level is not None else _level_from_environment(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
