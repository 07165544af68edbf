"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Look up every name; blank values count as missing and are reported together."""

    found = {name: optional_env_var(name) for name in names}
    missing = [name for name, value in found.items() if value is None]
    if missing:
        raise MissingConfigurationError(*missing)
    return {name: value for name, value in found.items() if value is not None}


def require_env_var(name: str) -> str:
    """Return a required environment variable by name."""

    return require_env_vars([name])[name]


def optional_env_var(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value


def env_flag(name: str, *, default: bool) -> bool:
    value = optional_env_var(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}", variable=name)


def env_int(name: str, *, default: int, minimum: int | None = None) -> int:
    value = optional_env_var(name)
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}", variable=name) from exc
    if minimum is not None and parsed < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {parsed}", variable=name)
    return parsed


def env_float(name: str, *, default: float, minimum: float | None = None) -> float:
    value = optional_env_var(name)
    if value is None:
        return default
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid number for {name}: {value!r}", variable=name) from exc
    if minimum is not None and parsed < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {parsed}", variable=name)
    return parsed
