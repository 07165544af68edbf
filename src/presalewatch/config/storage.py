"""Location of the local SQLite store."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "presalewatch"
STORE_FILENAME: Final[str] = "presalewatch.db"


def platform_data_dir() -> Path:
    """``$XDG_DATA_HOME/presalewatch`` (``%LOCALAPPDATA%`` on Windows)."""

    if os.name == "nt":
        root = optional_env_var("LOCALAPPDATA")
        fallback = Path.home() / "AppData" / "Local"
    else:
        root = optional_env_var("XDG_DATA_HOME")
        fallback = Path.home() / ".local" / "share"
    return (Path(root) if root else fallback) / APP_DIR_NAME


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def database_path(self, *, create_dir: bool = True) -> Path:
        directory = self.data_dir.expanduser().resolve()
        if create_dir:
            directory.mkdir(parents=True, exist_ok=True)
        return directory / STORE_FILENAME

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    configured = optional_env_var("PRESALEWATCH_DATA_DIR")
    return StorageConfig(data_dir=Path(configured) if configured else platform_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` when set, else a SQLite file in the data directory."""

    uri = optional_env_var("DATABASE_URI")
    if uri is None:
        uri = (storage or get_storage_config()).database_uri()
    return DatabaseConfig(uri=uri)
