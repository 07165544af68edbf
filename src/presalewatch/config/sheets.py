"""Google Sheets configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from .env import optional_env_var, require_env_var, require_env_vars
from .errors import MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

SHEETS_BASE_URL = "https://sheets.googleapis.com/v4/"
SHEETS_SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)
SHEETS_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ServiceAccountInfo:
    """Inline service account credentials (client email and PEM private key)."""

    client_email: str
    private_key: str
    token_uri: str = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True, slots=True)
class SheetsConfig:
    spreadsheet_id: str
    credentials_path: Path | None = None
    service_account: ServiceAccountInfo | None = None
    scopes: tuple[str, ...] = SHEETS_SCOPES
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(
            name="sheets",
            base_url=SHEETS_BASE_URL,
            timeout_seconds=SHEETS_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=1),
        )
    )


def get_sheets_config(*, resilience: ResilienceConfig | None = None) -> SheetsConfig:
    """Load spreadsheet id and service account credentials from the environment.

    ``GOOGLE_SHEETS_CREDENTIALS_PATH`` wins over the inline
    ``GOOGLE_SHEETS_CLIENT_EMAIL``/``GOOGLE_SHEETS_PRIVATE_KEY`` pair. Escaped
    newlines in the private key are expanded.
    """

    spreadsheet_id = require_env_var("GOOGLE_SHEETS_SPREADSHEET_ID")
    credentials_path = optional_env_var("GOOGLE_SHEETS_CREDENTIALS_PATH")
    service_account: ServiceAccountInfo | None = None
    if credentials_path is None:
        try:
            values = require_env_vars(("GOOGLE_SHEETS_CLIENT_EMAIL", "GOOGLE_SHEETS_PRIVATE_KEY"))
        except MissingConfigurationError as exc:
            raise MissingConfigurationError(
                "GOOGLE_SHEETS_CREDENTIALS_PATH or "
                "GOOGLE_SHEETS_CLIENT_EMAIL + GOOGLE_SHEETS_PRIVATE_KEY"
            ) from exc
        service_account = ServiceAccountInfo(
            client_email=values["GOOGLE_SHEETS_CLIENT_EMAIL"],
            private_key=values["GOOGLE_SHEETS_PRIVATE_KEY"].replace("\\n", "\n"),
        )

    config = SheetsConfig(
        spreadsheet_id=spreadsheet_id,
        credentials_path=Path(credentials_path) if credentials_path else None,
        service_account=service_account,
    )
    return replace(config, resilience=resilience) if resilience is not None else config
