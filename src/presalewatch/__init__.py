"""Crypto presale fact collection with manual-edit aware reconciliation."""

from __future__ import annotations

from importlib import metadata

try:
    __version__ = metadata.version(__name__)
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"
