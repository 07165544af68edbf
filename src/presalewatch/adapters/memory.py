"""In-memory tabular store for dry runs and tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from presalewatch.domain.errors import StoreError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from presalewatch.domain.ports import Row


class InMemoryTabularStore:
    def __init__(self, tables: Mapping[str, Sequence[Sequence[str]]] | None = None) -> None:
        self.tables: dict[str, list[Row]] = {
            name: [list(row) for row in rows] for name, rows in (tables or {}).items()
        }

    async def read_rows(self, table: str) -> list[Row]:
        return [list(row) for row in self.tables.get(table, [])]

    async def write_rows(self, table: str, start_index: int, rows: Sequence[Sequence[str]]) -> None:
        target = self.tables.setdefault(table, [])
        if start_index < 0 or start_index > len(target):
            raise StoreError(f"{table}: row {start_index} out of range")
        for offset, row in enumerate(rows):
            position = start_index + offset
            if position < len(target):
                target[position] = list(row)
            else:
                target.append(list(row))

    async def append_rows(self, table: str, rows: Sequence[Sequence[str]]) -> None:
        self.tables.setdefault(table, []).extend(list(row) for row in rows)

    async def delete_rows(self, table: str, indices: Sequence[int]) -> None:
        doomed = set(indices)
        rows = self.tables.get(table, [])
        self.tables[table] = [row for index, row in enumerate(rows) if index not in doomed]

    async def ensure_table(self, table: str, header: Sequence[str]) -> None:
        rows = self.tables.setdefault(table, [])
        if not rows:
            rows.append(list(header))
        else:
            rows[0] = list(header)
