"""Ordered per-project stages from stored state to history append."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from presalewatch.domain.errors import PresaleWatchError

from .reconciliation import (
    OverrideDetection,
    ReconciliationResult,
    StoredState,
    detect_overrides,
    merge_candidates,
    reconcile,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from .collection import CandidateCollector
    from .history import HistoryLedger
    from .model import Candidate, FieldName, MergedCandidate, ProjectConfig, ProjectRecord
    from .records import RecordStore

log = getLogger(__name__)

STAGES: Final[tuple[str, ...]] = (
    "capture_stored_state",
    "collect_candidates",
    "merge_candidates",
    "detect_overrides",
    "reconcile",
    "write_record",
    "append_history",
)


class OutcomeStatus(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    NO_DATA = "no_data"
    SKIPPED = "skipped"
    FAILED = "failed"


_SUCCESSFUL = frozenset({OutcomeStatus.CREATED, OutcomeStatus.UPDATED, OutcomeStatus.UNCHANGED})


@dataclass(frozen=True, slots=True)
class ProjectOutcome:
    """Result of running one project through the pipeline."""

    url: str
    status: OutcomeStatus
    record: ProjectRecord | None = None
    candidates: int = 0
    history_appended: bool = False
    newly_flagged: frozenset[FieldName] = frozenset()
    consumed_flags: frozenset[FieldName] = frozenset()
    error: str | None = None
    image: bytes | None = field(default=None, repr=False)
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status in _SUCCESSFUL


@dataclass(slots=True)
class ProjectPipeline:
    """Run the reconciliation stages for one project under its URL lock.

    The stored state is captured before any collection so override detection
    compares against what a human could have edited, never against values
    this run is about to write. The write itself re-reads the row and only
    touches the fields this run changed.
    """

    records: RecordStore
    ledger: HistoryLedger
    collector: CandidateCollector
    clock: Callable[[], datetime]

    async def run(self, config: ProjectConfig) -> ProjectOutcome:
        if config.skip:
            log.info("Skipping %s (marked skip)", config.url)
            return ProjectOutcome(url=config.url, status=OutcomeStatus.SKIPPED)

        started = time.perf_counter()
        async with self.records.locks.hold(config.url):
            state = await self.capture_stored_state(config.url)
            candidates = await self.collect_candidates(config)
            merged = self.merge_candidates(candidates)
            detection = self.detect_overrides(state)
            result = self.reconcile(detection.record, merged, url=config.url)
            if result.record is None:
                log.info("No data extracted for %s, nothing stored", config.url)
                return ProjectOutcome(
                    url=config.url,
                    status=OutcomeStatus.NO_DATA,
                    candidates=len(candidates),
                    elapsed_seconds=time.perf_counter() - started,
                )
            stored = await self.write_record(
                result.record,
                changed_fields=result.changed_fields,
                newly_flagged=detection.newly_flagged,
                consumed_flags=result.consumed_flags,
            )

        history_appended, history_error = await self.append_history(stored)
        status = _status_for(state.record, merged, result, detection)
        log.info("Project %s %s (%d candidate(s))", config.url, status, len(candidates))
        return ProjectOutcome(
            url=config.url,
            status=status,
            record=stored,
            candidates=len(candidates),
            history_appended=history_appended,
            newly_flagged=detection.newly_flagged,
            consumed_flags=result.consumed_flags,
            error=history_error,
            image=merged.image,
            elapsed_seconds=time.perf_counter() - started,
        )

    async def capture_stored_state(self, url: str) -> StoredState:
        record = await self.records.get(url)
        latest = None
        if record is not None and record.project_id:
            latest = await self.ledger.latest(record.project_id)
        return StoredState(record=record, latest=latest)

    async def collect_candidates(self, config: ProjectConfig) -> list[Candidate]:
        return await self.collector.collect(config)

    def merge_candidates(self, candidates: Sequence[Candidate]) -> MergedCandidate:
        return merge_candidates(candidates)

    def detect_overrides(self, state: StoredState) -> OverrideDetection:
        return detect_overrides(state, now=self.clock())

    def reconcile(
        self,
        stored: ProjectRecord | None,
        merged: MergedCandidate,
        *,
        url: str,
    ) -> ReconciliationResult:
        return reconcile(stored, merged, url=url, now=self.clock())

    async def write_record(
        self,
        record: ProjectRecord,
        *,
        changed_fields: frozenset[FieldName],
        newly_flagged: frozenset[FieldName],
        consumed_flags: frozenset[FieldName],
    ) -> ProjectRecord:
        """Apply the reconciled changes over the row as it reads at write time."""

        return await self.records.apply_locked(
            record,
            changed_fields=changed_fields,
            newly_flagged=newly_flagged,
            consumed_flags=consumed_flags,
        )

    async def append_history(self, record: ProjectRecord) -> tuple[bool, str | None]:
        """Append to the ledger; a failure here never undoes the record write."""

        if record.project_id is None:
            return False, None
        try:
            snapshot = await self.ledger.append(
                record.project_id,
                record.url,
                record.values.current_price,
                record.values.raised,
            )
        except PresaleWatchError as exc:
            log.exception("History append failed for %s", record.url)
            return False, f"history append failed: {exc}"
        return snapshot is not None, None


def _status_for(
    before: ProjectRecord | None,
    merged: MergedCandidate,
    result: ReconciliationResult,
    detection: OverrideDetection,
) -> OutcomeStatus:
    if result.created or before is None:
        return OutcomeStatus.CREATED
    if merged.values.is_empty():
        return OutcomeStatus.NO_DATA
    if not (result.changed_fields or result.consumed_flags or detection.newly_flagged):
        return OutcomeStatus.UNCHANGED
    return OutcomeStatus.UPDATED


async def detect_all_overrides(
    records: RecordStore,
    ledger: HistoryLedger,
    *,
    clock: Callable[[], datetime],
) -> list[tuple[str, frozenset[FieldName]]]:
    """Run only override detection over every stored project and persist new flags."""

    flagged: list[tuple[str, frozenset[FieldName]]] = []
    for listed in await records.all_records():
        async with records.locks.hold(listed.url):
            record = await records.get(listed.url)
            if record is None or record.project_id is None:
                continue
            latest = await ledger.latest(record.project_id)
            detection = detect_overrides(StoredState(record=record, latest=latest), now=clock())
            if detection.newly_flagged and detection.record is not None:
                await records.apply_locked(
                    detection.record,
                    changed_fields=frozenset(),
                    newly_flagged=detection.newly_flagged,
                )
                flagged.append((record.url, detection.newly_flagged))
    log.info("Override detection flagged %d project(s)", len(flagged))
    return flagged


__all__ = [
    "STAGES",
    "OutcomeStatus",
    "ProjectOutcome",
    "ProjectPipeline",
    "detect_all_overrides",
]
