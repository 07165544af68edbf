"""Normalisation of extractor output into comparable field values."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final

from presalewatch.domain.model import (
    AMOUNT_FIELDS,
    NOT_AVAILABLE,
    FieldValues,
    is_present,
)

_CURRENCY_NOISE = re.compile(r"[$€£¥,\s]")
_AMOUNT_NOISE = re.compile(r"[$€£¥,]")
_LEADING_NUMBER = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")
# the suffix must follow the number directly: "1,000 BUSD" carries no multiplier
_SUFFIXED_AMOUNT = re.compile(
    r"^([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:E[-+]?\d+)?)\s*"
    r"(?:(THOUSAND|MILLION|BILLION|K|M|B)(?![A-Z]))?"
)
_SUFFIX_MULTIPLIERS: Final[dict[str, Decimal]] = {
    "K": Decimal(1_000),
    "THOUSAND": Decimal(1_000),
    "M": Decimal(1_000_000),
    "MILLION": Decimal(1_000_000),
    "B": Decimal(1_000_000_000),
    "BILLION": Decimal(1_000_000_000),
}
_CENTS = Decimal("0.01")


def _leading_decimal(text: str) -> Decimal | None:
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def format_price(value: object) -> str:
    """Keep the literal numeric part of a price (``"$0.0150 USD"`` -> ``"0.0150"``)."""

    if value is None:
        return NOT_AVAILABLE
    text = str(value)
    if not is_present(text):
        return NOT_AVAILABLE
    cleaned = _CURRENCY_NOISE.sub("", text)
    match = _LEADING_NUMBER.match(cleaned)
    return match.group(0) if match else NOT_AVAILABLE


def format_amount(value: object) -> str:
    """Normalise an amount to two decimals, expanding K/M/B suffixes.

    >>> format_amount("$2.5M")
    '2500000.00'
    """

    if value is None:
        return NOT_AVAILABLE
    text = str(value)
    if not is_present(text):
        return NOT_AVAILABLE
    cleaned = _AMOUNT_NOISE.sub("", text).strip().upper()
    match = _SUFFIXED_AMOUNT.match(cleaned)
    if match is None:
        return NOT_AVAILABLE
    number = _leading_decimal(match.group(1))
    if number is None:
        return NOT_AVAILABLE
    multiplier = _SUFFIX_MULTIPLIERS.get(match.group(2) or "", Decimal(1))
    return str((number * multiplier).quantize(_CENTS, rounding=ROUND_HALF_UP))


def normalize_values(values: FieldValues) -> FieldValues:
    """Apply price formatting to price fields and amount formatting to amounts."""

    result = values
    for name, value in values.items():
        formatter = format_amount if name in AMOUNT_FIELDS else format_price
        result = result.with_value(name, formatter(value))
    return result


__all__ = ["format_amount", "format_price", "normalize_values"]
