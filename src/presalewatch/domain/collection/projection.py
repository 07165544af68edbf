"""Dot-path projection of JSON documents onto field values."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from presalewatch.domain.model import FieldValues, coerce_value

if TYPE_CHECKING:
    from presalewatch.domain.model import FieldName

_MISSING = object()


def resolve_path(document: object, path: str) -> object | None:
    """Follow a dot-separated ``path`` through mappings and lists.

    Numeric segments index into lists. Any miss returns ``None``; this
    function never raises.
    """

    if not path or not path.strip():
        return None
    current: object = document
    for segment in path.strip().split("."):
        current = _step(current, segment)
        if current is _MISSING:
            return None
    return current


def _step(current: object, segment: str) -> object:
    if isinstance(current, Mapping):
        return current.get(segment, _MISSING)  # type: ignore[union-attr]
    if isinstance(current, Sequence) and not isinstance(current, str | bytes):
        try:
            index = int(segment)
        except ValueError:
            return _MISSING
        if -len(current) <= index < len(current):
            return current[index]
    return _MISSING


def _stringify(value: object) -> object:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Mapping | list):
        # structured values carry no usable scalar
        return None
    return value


def project(document: object, path_map: Mapping[FieldName, str]) -> FieldValues:
    """Project ``document`` onto the tracked fields; unmapped or missing paths are ``N/A``."""

    values = FieldValues()
    for name, path in path_map.items():
        resolved = resolve_path(document, path)
        values = values.with_value(name, coerce_value(_stringify(resolved)))
    return values


__all__ = ["project", "resolve_path"]
