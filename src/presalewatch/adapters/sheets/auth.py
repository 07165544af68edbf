"""Service account bearer tokens for the Sheets API."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from presalewatch.domain.errors import StoreError

if TYPE_CHECKING:
    from presalewatch.config.sheets import SheetsConfig

log = getLogger(__name__)


def load_credentials(config: SheetsConfig) -> service_account.Credentials:
    """Build credentials from the key file or the inline client email and key."""

    scopes = list(config.scopes)
    if config.credentials_path is not None:
        return service_account.Credentials.from_service_account_file(
            str(config.credentials_path),
            scopes=scopes,
        )
    if config.service_account is None:
        raise StoreError("No Google service account credentials configured")
    info = {
        "type": "service_account",
        "client_email": config.service_account.client_email,
        "private_key": config.service_account.private_key,
        "token_uri": config.service_account.token_uri,
    }
    return service_account.Credentials.from_service_account_info(info, scopes=scopes)


class ServiceAccountTokenProvider:
    """Hand out a valid access token, refreshing it off the event loop when needed."""

    def __init__(self, credentials: service_account.Credentials) -> None:
        self._credentials = credentials
        self._lock = asyncio.Lock()

    async def token(self) -> str:
        async with self._lock:
            if not self._credentials.valid:
                log.debug("Refreshing Google service account token")
                try:
                    await asyncio.to_thread(self._credentials.refresh, Request())
                except GoogleAuthError as exc:
                    raise StoreError(f"Google authentication failed: {exc}") from exc
            return str(self._credentials.token)
