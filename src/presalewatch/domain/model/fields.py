"""Tracked fact fields and their value container."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

NOT_AVAILABLE: Final[str] = "N/A"


class FieldName(StrEnum):
    CURRENT_PRICE = "currentPrice"
    NEXT_PRICE = "nextPrice"
    LISTING_PRICE = "listingPrice"
    RAISED = "raised"


TRACKED_FIELDS: Final[tuple[FieldName, ...]] = tuple(FieldName)
PRICE_FIELDS: Final[tuple[FieldName, ...]] = (
    FieldName.CURRENT_PRICE,
    FieldName.NEXT_PRICE,
    FieldName.LISTING_PRICE,
)
AMOUNT_FIELDS: Final[tuple[FieldName, ...]] = (FieldName.RAISED,)
# only these two are mirrored in the history ledger
DETECTABLE_FIELDS: Final[tuple[FieldName, ...]] = (FieldName.CURRENT_PRICE, FieldName.RAISED)

_ATTRIBUTE_BY_FIELD: Final[dict[FieldName, str]] = {
    FieldName.CURRENT_PRICE: "current_price",
    FieldName.NEXT_PRICE: "next_price",
    FieldName.LISTING_PRICE: "listing_price",
    FieldName.RAISED: "raised",
}


def is_present(value: str | None) -> bool:
    """Return ``True`` when ``value`` carries information (not blank, not ``N/A``)."""

    if value is None:
        return False
    stripped = value.strip()
    return bool(stripped) and stripped.upper() != NOT_AVAILABLE


def coerce_value(value: object) -> str:
    """Turn a raw cell or payload value into a field value string.

    ``None`` and blank strings become ``N/A``; booleans and numbers are
    stringified.
    """

    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value).strip()
    if not text or text.upper() == NOT_AVAILABLE:
        return NOT_AVAILABLE
    return text


@dataclass(frozen=True, slots=True)
class FieldValues:
    """The four tracked values of a project; absent values are ``N/A``."""

    current_price: str = NOT_AVAILABLE
    next_price: str = NOT_AVAILABLE
    listing_price: str = NOT_AVAILABLE
    raised: str = NOT_AVAILABLE

    def __post_init__(self) -> None:
        for item in fields(self):
            object.__setattr__(self, item.name, coerce_value(getattr(self, item.name)))

    def get(self, name: FieldName) -> str:
        return getattr(self, _ATTRIBUTE_BY_FIELD[name])

    def with_value(self, name: FieldName, value: str) -> FieldValues:
        return replace(self, **{_ATTRIBUTE_BY_FIELD[name]: value})

    def overlay(self, other: FieldValues) -> FieldValues:
        """Return a copy where every present value of ``other`` replaces ours."""

        result = self
        for name in TRACKED_FIELDS:
            value = other.get(name)
            if is_present(value):
                result = result.with_value(name, value)
        return result

    def items(self) -> Iterator[tuple[FieldName, str]]:
        for name in TRACKED_FIELDS:
            yield name, self.get(name)

    def present_fields(self) -> frozenset[FieldName]:
        return frozenset(name for name, value in self.items() if is_present(value))

    def is_empty(self) -> bool:
        return not self.present_fields()

    def to_dict(self) -> dict[str, str]:
        return {str(name): value for name, value in self.items()}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> FieldValues:
        """Build values from a mapping keyed by wire names (``currentPrice``...)."""

        return cls(
            **{
                _ATTRIBUTE_BY_FIELD[name]: coerce_value(mapping.get(str(name)))
                for name in TRACKED_FIELDS
            }
        )


def parse_field_name(raw: str) -> FieldName | None:
    try:
        return FieldName(raw.strip())
    except ValueError:
        return None


__all__ = [
    "AMOUNT_FIELDS",
    "DETECTABLE_FIELDS",
    "NOT_AVAILABLE",
    "PRICE_FIELDS",
    "TRACKED_FIELDS",
    "FieldName",
    "FieldValues",
    "coerce_value",
    "is_present",
    "parse_field_name",
]
