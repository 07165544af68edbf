"""Domain exception hierarchy."""

from __future__ import annotations


class PresaleWatchError(RuntimeError):
    """Base class for failures raised by the collection and reconciliation core."""


class RenderError(PresaleWatchError):
    """A page or capture region could not be rendered."""


class ExtractionError(PresaleWatchError):
    """The extractor returned malformed or empty output."""


class FetchError(PresaleWatchError):
    """A JSON API could not be fetched or did not return JSON."""


class StoreError(PresaleWatchError):
    """The tabular store failed to read or write."""


class ProjectConfigError(PresaleWatchError):
    """A project's configuration is invalid and the project cannot run."""


__all__ = [
    "ExtractionError",
    "FetchError",
    "PresaleWatchError",
    "ProjectConfigError",
    "RenderError",
    "StoreError",
]
