"""Append-only price history ledger over the ``PriceHistory`` table."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from presalewatch.domain.model import HistorySnapshot, coerce_value

from .tables import (
    HCOL_PROJECT_ID,
    HISTORY_HEADER,
    HISTORY_TABLE,
    cell,
    decode_snapshot,
    encode_snapshot,
    next_id,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from presalewatch.domain.ports import Row, TabularStore

log = getLogger(__name__)


class HistoryLedger:
    """Record ``(currentPrice, raised)`` pairs whenever they change for a project."""

    def __init__(self, store: TabularStore, *, clock: Callable[[], datetime]) -> None:
        self._store = store
        self._clock = clock
        self._append_lock = asyncio.Lock()

    async def ensure_table(self) -> None:
        await self._store.ensure_table(HISTORY_TABLE, HISTORY_HEADER)

    async def latest(self, project_id: str) -> HistorySnapshot | None:
        """Return the last ledger row for ``project_id`` in table order."""

        return _latest_in(await self._store.read_rows(HISTORY_TABLE), project_id)

    async def append(
        self,
        project_id: str,
        url: str,
        current_price: str,
        raised: str,
    ) -> HistorySnapshot | None:
        """Append a snapshot unless it repeats the project's previous entry."""

        current_price, raised = coerce_value(current_price), coerce_value(raised)
        async with self._append_lock:
            rows = await self._store.read_rows(HISTORY_TABLE)
            previous = _latest_in(rows, project_id)
            if previous is not None and (previous.current_price, previous.raised) == (
                current_price,
                raised,
            ):
                log.debug("History for project %s unchanged", project_id)
                return None

            snapshot = HistorySnapshot(
                history_id=next_id(rows),
                project_id=project_id,
                url=url,
                current_price=current_price,
                raised=raised,
                captured_at=self._clock(),
            )
            await self._store.append_rows(HISTORY_TABLE, [encode_snapshot(snapshot)])
        log.info(
            "History appended for project %s: currentPrice=%s raised=%s",
            project_id,
            current_price,
            raised,
        )
        return snapshot


def _latest_in(rows: list[Row], project_id: str) -> HistorySnapshot | None:
    for row in reversed(rows[1:]):
        if cell(row, HCOL_PROJECT_ID) == project_id:
            return decode_snapshot(row)
    return None


__all__ = ["HistoryLedger"]
