"""Ports for the spreadsheet-like tabular store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

type Row = list[str]


@runtime_checkable
class TabularStore(Protocol):
    """Row-oriented storage addressed by table name and row index.

    Row index 0 is the header row. Implementations raise ``StoreError`` on any
    backend failure.
    """

    async def read_rows(self, table: str) -> list[Row]:
        """Return every row of ``table`` including the header; missing table -> ``[]``."""
        ...

    async def write_rows(self, table: str, start_index: int, rows: Sequence[Sequence[str]]) -> None:
        """Overwrite consecutive rows starting at ``start_index``."""
        ...

    async def append_rows(self, table: str, rows: Sequence[Sequence[str]]) -> None: ...

    async def delete_rows(self, table: str, indices: Sequence[int]) -> None: ...

    async def ensure_table(self, table: str, header: Sequence[str]) -> None:
        """Create ``table`` if needed and make sure row 0 holds ``header``."""
        ...


__all__ = ["Row", "TabularStore"]
