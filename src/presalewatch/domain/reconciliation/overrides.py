"""Detection of manual edits made to stored records between runs."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from presalewatch.domain.model import DETECTABLE_FIELDS, is_present

if TYPE_CHECKING:
    from datetime import datetime

    from presalewatch.domain.model import FieldName, HistorySnapshot, ProjectRecord

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoredState:
    """Record and latest history entry, captured before any automation fetch."""

    record: ProjectRecord | None = None
    latest: HistorySnapshot | None = None


@dataclass(frozen=True, slots=True)
class OverrideDetection:
    record: ProjectRecord | None
    newly_flagged: frozenset[FieldName] = frozenset()


def detect_overrides(state: StoredState, *, now: datetime) -> OverrideDetection:
    """Flag history-tracked fields whose stored value diverges from the ledger.

    Only ``currentPrice`` and ``raised`` are compared since they are the only
    fields the ledger mirrors. Without a stored record or a ledger entry there
    is nothing to compare against. Fields already flagged stay flagged.
    """

    record, latest = state.record, state.latest
    if record is None or latest is None:
        return OverrideDetection(record=record)

    newly_flagged: set[FieldName] = set()
    for name in DETECTABLE_FIELDS:
        if record.is_flagged(name):
            continue
        stored = record.value(name)
        if is_present(stored) and stored.strip() != latest.value(name).strip():
            newly_flagged.add(name)

    if not newly_flagged:
        return OverrideDetection(record=record)

    for name in sorted(newly_flagged):
        log.info(
            "Manual override detected for %s field %s: stored %r, last recorded %r",
            record.url,
            name,
            record.value(name),
            latest.value(name),
        )
    flagged = record.evolve(
        override_flags=record.override_flags | newly_flagged,
        last_manual_edit_at=now,
    )
    return OverrideDetection(record=flagged, newly_flagged=frozenset(newly_flagged))


__all__ = ["OverrideDetection", "StoredState", "detect_overrides"]
