"""Per-field reconciliation of merged automation output with the stored record."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from presalewatch.domain.model import TRACKED_FIELDS, ProjectRecord, is_present

if TYPE_CHECKING:
    from datetime import datetime

    from presalewatch.domain.model import FieldName, MergedCandidate

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Reconciled record plus what changed relative to the stored one."""

    record: ProjectRecord | None
    consumed_flags: frozenset[FieldName] = frozenset()
    changed_fields: frozenset[FieldName] = frozenset()
    created: bool = False


def reconcile(
    stored: ProjectRecord | None,
    merged: MergedCandidate,
    *,
    url: str,
    now: datetime,
) -> ReconciliationResult:
    """Apply the per-field rules to ``merged`` against ``stored``.

    - stored value absent: take the new value.
    - stored present and flagged: a present new value wins and clears the
      flag, otherwise the stored value and the flag are kept.
    - stored present and not flagged: a present new value wins, otherwise the
      stored value is kept.

    A URL without a stored record and without any present value yields no
    record at all.
    """

    if stored is None:
        if merged.values.is_empty():
            return ReconciliationResult(record=None)
        record = ProjectRecord(
            url=url,
            values=merged.values,
            auxiliary_facts=merged.facts,
            created_at=now,
            updated_at=now,
            last_automation_run_at=now,
        )
        return ReconciliationResult(
            record=record,
            changed_fields=merged.values.present_fields(),
            created=True,
        )

    values = stored.values
    flags = set(stored.override_flags)
    consumed: set[FieldName] = set()
    changed: set[FieldName] = set()
    for name in TRACKED_FIELDS:
        new_value = merged.values.get(name)
        if not is_present(new_value):
            # stored value wins; a flag on it stays in place
            continue
        if name in flags:
            flags.discard(name)
            consumed.add(name)
            log.info("Override on %s field %s consumed by value %r", url, name, new_value)
        if new_value != values.get(name):
            changed.add(name)
        values = values.with_value(name, new_value)

    record = stored.evolve(
        values=values,
        auxiliary_facts=merged.facts or stored.auxiliary_facts,
        override_flags=frozenset(flags),
        created_at=stored.created_at or now,
        updated_at=now,
        last_automation_run_at=now,
    )
    return ReconciliationResult(
        record=record,
        consumed_flags=frozenset(consumed),
        changed_fields=frozenset(changed),
    )


__all__ = ["ReconciliationResult", "reconcile"]
