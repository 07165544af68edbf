"""Ports for turning raw inputs into field values."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from presalewatch.domain.model import FieldValues


@runtime_checkable
class VisionExtractor(Protocol):
    """Infer field values from a captured image.

    Missing optional fields come back as ``N/A``; output lacking
    ``currentPrice`` or ``raised``, or not parseable, raises ``ExtractionError``.
    """

    async def infer(self, image: bytes, auxiliary_text: str | None = None) -> FieldValues: ...


@runtime_checkable
class TextExtractor(Protocol):
    """Normalise a text or JSON document into field values."""

    async def normalize(self, document: str, auxiliary_text: str | None = None) -> FieldValues: ...


__all__ = ["TextExtractor", "VisionExtractor"]
