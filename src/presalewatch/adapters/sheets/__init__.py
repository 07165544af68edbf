"""Google Sheets adapter for the tabular store port."""

from __future__ import annotations

from .auth import ServiceAccountTokenProvider, load_credentials
from .client import GoogleSheetsTabularStore, a1_range

__all__ = [
    "GoogleSheetsTabularStore",
    "ServiceAccountTokenProvider",
    "a1_range",
    "load_credentials",
]
