"""Record store over the ``CryptoProjects`` table."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from .locks import KeyedLocks
from .tables import (
    COL_URL,
    PROJECT_HEADER,
    PROJECTS_TABLE,
    cell,
    decode_record,
    encode_record,
    next_id,
)

if TYPE_CHECKING:
    from presalewatch.domain.model import FieldName, ProjectRecord
    from presalewatch.domain.ports import Row, TabularStore

log = getLogger(__name__)


class RecordStore:
    """Read and write canonical project records keyed by URL.

    Writes for one URL are serialised through ``locks``; the id allocation of
    new rows is serialised per table. Concurrent edits of the id column by a
    human are not guarded against. Backend failures surface as ``StoreError``
    from the underlying ``TabularStore``.
    """

    def __init__(self, store: TabularStore, *, locks: KeyedLocks | None = None) -> None:
        self._store = store
        self.locks = locks or KeyedLocks()
        self._append_lock = asyncio.Lock()

    async def ensure_table(self) -> None:
        await self._store.ensure_table(PROJECTS_TABLE, PROJECT_HEADER)

    async def get(self, url: str) -> ProjectRecord | None:
        rows = await self._store.read_rows(PROJECTS_TABLE)
        index = _find_row(rows, url)
        return decode_record(rows[index]) if index is not None else None

    async def all_records(self) -> list[ProjectRecord]:
        rows = await self._store.read_rows(PROJECTS_TABLE)
        return [record for row in rows[1:] if (record := decode_record(row)) is not None]

    async def upsert(self, record: ProjectRecord) -> ProjectRecord:
        """Update the row holding ``record.url`` in place or append a new row."""

        async with self.locks.hold(record.url):
            return await self.upsert_locked(record)

    async def upsert_locked(self, record: ProjectRecord) -> ProjectRecord:
        """``upsert`` for callers already holding the lock for ``record.url``."""

        rows = await self._store.read_rows(PROJECTS_TABLE)
        index = _find_row(rows, record.url)
        if index is None:
            return await self._append(record)
        return await self._replace(index, record, decode_record(rows[index]))

    async def apply_locked(
        self,
        record: ProjectRecord,
        *,
        changed_fields: frozenset[FieldName],
        newly_flagged: frozenset[FieldName] = frozenset(),
        consumed_flags: frozenset[FieldName] = frozenset(),
    ) -> ProjectRecord:
        """Apply an automation result over the row as it reads now.

        Only ``changed_fields`` are taken from ``record``; every other value in
        the row is kept, including edits made after ``record`` was derived.
        Flags become the row's flags plus ``newly_flagged`` minus
        ``consumed_flags``. A row that vanished in the meantime is re-created.
        """

        rows = await self._store.read_rows(PROJECTS_TABLE)
        index = _find_row(rows, record.url)
        current = decode_record(rows[index]) if index is not None else None
        if index is None or current is None:
            return await self.upsert_locked(record)

        values = current.values
        for name in changed_fields:
            values = values.with_value(name, record.value(name))
        applied = current.evolve(
            values=values,
            auxiliary_facts=record.auxiliary_facts,
            override_flags=(current.override_flags | newly_flagged) - consumed_flags,
            updated_at=record.updated_at or current.updated_at,
            last_automation_run_at=record.last_automation_run_at or current.last_automation_run_at,
            last_manual_edit_at=(
                record.last_manual_edit_at if newly_flagged else current.last_manual_edit_at
            ),
        )
        return await self._replace(index, applied, current)

    async def _replace(
        self,
        index: int,
        record: ProjectRecord,
        existing: ProjectRecord | None,
    ) -> ProjectRecord:
        created_at = (existing.created_at if existing else None) or record.created_at
        project_id = (existing.project_id if existing else None) or record.project_id
        if project_id:
            stored = record.evolve(project_id=project_id, created_at=created_at)
            await self._store.write_rows(PROJECTS_TABLE, index, [encode_record(stored)])
        else:
            # a row with a blank id draws from the same sequence as appends
            async with self._append_lock:
                rows = await self._store.read_rows(PROJECTS_TABLE)
                stored = record.evolve(project_id=next_id(rows), created_at=created_at)
                await self._store.write_rows(PROJECTS_TABLE, index, [encode_record(stored)])
            log.info("Allocated id %s to existing row for %s", stored.project_id, record.url)
        log.debug("Updated row %d for %s", index, record.url)
        return stored

    async def _append(self, record: ProjectRecord) -> ProjectRecord:
        async with self._append_lock:
            rows = await self._store.read_rows(PROJECTS_TABLE)
            stored = record.evolve(project_id=next_id(rows))
            await self._store.append_rows(PROJECTS_TABLE, [encode_record(stored)])
        log.info("Created project %s for %s", stored.project_id, record.url)
        return stored


def _find_row(rows: list[Row], url: str) -> int | None:
    for index, row in enumerate(rows[1:], start=1):
        if cell(row, COL_URL) == url:
            return index
    return None


__all__ = ["RecordStore"]
