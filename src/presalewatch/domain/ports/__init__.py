"""Domain port definitions for adapters."""

from __future__ import annotations

from .extraction import TextExtractor, VisionExtractor
from .fetching import JsonFetcher
from .notification import Notifier
from .persistence import Row, TabularStore
from .rendering import Renderer

__all__ = [
    "JsonFetcher",
    "Notifier",
    "Renderer",
    "Row",
    "TabularStore",
    "TextExtractor",
    "VisionExtractor",
]
