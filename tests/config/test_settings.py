from __future__ import annotations

import logging
from pathlib import Path

import pytest

from presalewatch.config import (
    ConfigurationError,
    MissingConfigurationError,
    ResilienceConfig,
    configure_logging,
    get_batch_config,
    get_browser_config,
    get_database_config,
    get_openai_config,
    get_sheets_config,
    get_storage_config,
    get_telegram_config,
)

_SHEETS_VARS = (
    "GOOGLE_SHEETS_SPREADSHEET_ID",
    "GOOGLE_SHEETS_CREDENTIALS_PATH",
    "GOOGLE_SHEETS_CLIENT_EMAIL",
    "GOOGLE_SHEETS_PRIVATE_KEY",
)


@pytest.fixture
def clean_sheets_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _SHEETS_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-1")
    return monkeypatch


def test_sheets_inline_key_expands_newlines(clean_sheets_env: pytest.MonkeyPatch) -> None:
    clean_sheets_env.setenv("GOOGLE_SHEETS_CLIENT_EMAIL", "bot@project.iam.gserviceaccount.com")
    clean_sheets_env.setenv("GOOGLE_SHEETS_PRIVATE_KEY", "-----BEGIN-----\\nabc\\n-----END-----")

    config = get_sheets_config()

    assert config.spreadsheet_id == "sheet-1"
    assert config.credentials_path is None
    assert config.service_account is not None
    assert config.service_account.private_key == "-----BEGIN-----\nabc\n-----END-----"


def test_sheets_key_file_wins(clean_sheets_env: pytest.MonkeyPatch) -> None:
    clean_sheets_env.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", "/secrets/key.json")
    clean_sheets_env.setenv("GOOGLE_SHEETS_CLIENT_EMAIL", "ignored@example.com")

    config = get_sheets_config(resilience=ResilienceConfig(name="custom"))

    assert config.credentials_path == Path("/secrets/key.json")
    assert config.service_account is None
    assert config.resilience.name == "custom"


def test_sheets_without_credentials_fails(clean_sheets_env: pytest.MonkeyPatch) -> None:
    with pytest.raises(MissingConfigurationError, match="GOOGLE_SHEETS_CREDENTIALS_PATH"):
        get_sheets_config()


def test_telegram_is_optional(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.delenv("TELEGRAM_CHAT_ID", raising=False)

    assert get_telegram_config() is None

    monkeypatch.setenv("TELEGRAM_CHAT_ID", "-100")
    config = get_telegram_config()
    assert config is not None
    assert config.chat_id == "-100"


def test_openai_requires_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(MissingConfigurationError):
        get_openai_config()

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
    assert get_openai_config().model == "gpt-4o-mini"


def test_batch_config_prefers_explicit_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAX_CONCURRENT_REQUESTS", "5")
    monkeypatch.setenv("INTER_BATCH_DELAY_SECONDS", "0")
    monkeypatch.setenv("CALL_TIMEOUT_SECONDS", "45")

    from_env = get_batch_config()
    explicit = get_batch_config(workers=1, inter_batch_delay=3.0)

    assert (from_env.workers, from_env.inter_batch_delay, from_env.call_timeout) == (5, 0.0, 45.0)
    assert (explicit.workers, explicit.inter_batch_delay) == (1, 3.0)


def test_browser_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("BROWSER_HEADLESS", "false")
    monkeypatch.setenv("BROWSER_TIMEOUT", "5000")
    monkeypatch.setenv("SCREENSHOTS_DIR", str(tmp_path))

    config = get_browser_config()

    assert not config.headless
    assert config.timeout_ms == 5000
    assert config.screenshots_dir == tmp_path


def test_storage_paths_follow_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PRESALEWATCH_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    storage = get_storage_config()

    assert storage.database_path() == tmp_path.resolve() / "presalewatch.db"
    assert get_database_config().uri.startswith("sqlite+pysqlite:///")

    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")
    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"


def test_configure_logging_reads_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")

    configure_logging(force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ConfigurationError):
        configure_logging(force=True)
