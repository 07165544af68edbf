"""Candidates, canonical project records and history snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from .fields import NOT_AVAILABLE, FieldName, FieldValues, coerce_value

if TYPE_CHECKING:
    from datetime import datetime


class SourceKind(StrEnum):
    """Primary extraction strategy of a project."""

    SCREENSHOT = "screenshot"
    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class AuxiliaryFact:
    """Labelled context collected alongside the primary source."""

    label: str
    text: str = ""
    success: bool = True
    error: str | None = None


@dataclass(frozen=True, slots=True)
class Candidate:
    """One extraction result; never persisted."""

    values: FieldValues
    source: SourceKind
    origin: str
    facts: tuple[AuxiliaryFact, ...] = ()
    image: bytes | None = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class MergedCandidate:
    """Output of the merge stage: one value per field plus the combined facts."""

    values: FieldValues = field(default_factory=FieldValues)
    facts: tuple[AuxiliaryFact, ...] = ()
    image: bytes | None = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class ProjectRecord:
    """Canonical, persisted state of one project URL.

    ``project_id`` is ``None`` until the store allocates one on first write.
    """

    url: str
    values: FieldValues = field(default_factory=FieldValues)
    project_id: str | None = None
    auxiliary_facts: tuple[AuxiliaryFact, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_automation_run_at: datetime | None = None
    last_manual_edit_at: datetime | None = None
    override_flags: frozenset[FieldName] = frozenset()

    def value(self, name: FieldName) -> str:
        return self.values.get(name)

    def is_flagged(self, name: FieldName) -> bool:
        return name in self.override_flags

    def evolve(self, **changes: object) -> ProjectRecord:
        return replace(self, **changes)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    """Immutable ledger entry for the two history-tracked fields."""

    history_id: str
    project_id: str
    url: str
    current_price: str
    raised: str
    captured_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "current_price", coerce_value(self.current_price))
        object.__setattr__(self, "raised", coerce_value(self.raised))

    def value(self, name: FieldName) -> str:
        if name is FieldName.CURRENT_PRICE:
            return self.current_price
        if name is FieldName.RAISED:
            return self.raised
        return NOT_AVAILABLE


__all__ = [
    "AuxiliaryFact",
    "Candidate",
    "HistorySnapshot",
    "MergedCandidate",
    "ProjectRecord",
    "SourceKind",
]
