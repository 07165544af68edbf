"""Tabular store backed by any SQLAlchemy engine (SQLite by default)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from presalewatch.domain.errors import StoreError

from .tables import create_all_tables, tabular_row_table

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy import Engine

    from presalewatch.domain.ports import Row

log = logging.getLogger(__name__)

_T = tabular_row_table


class SqlAlchemyTabularStore:
    """Row store on a relational database.

    Calls run synchronously on the event loop thread; statements are short
    and local, so the async signatures only satisfy the ``TabularStore`` port.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        create_all_tables(engine)

    @classmethod
    def from_uri(cls, database_uri: str) -> SqlAlchemyTabularStore:
        log.info("Opening tabular store at %s", database_uri)
        return cls(create_engine(database_uri, future=True))

    def dispose(self) -> None:
        self.engine.dispose()

    async def read_rows(self, table: str) -> list[Row]:
        def read(session: Session) -> list[Row]:
            stmt = select(_T.c.cells).where(_T.c.table_name == table).order_by(_T.c.position)
            return [[str(value) for value in cells] for cells in session.scalars(stmt)]

        return self._run(read, f"read {table}")

    async def write_rows(self, table: str, start_index: int, rows: Sequence[Sequence[str]]) -> None:
        def write(session: Session) -> None:
            for offset, row in enumerate(rows):
                position = start_index + offset
                result = session.execute(
                    update(_T)
                    .where(_T.c.table_name == table, _T.c.position == position)
                    .values(cells=list(row))
                )
                if result.rowcount == 0:  # type: ignore[attr-defined]
                    session.execute(
                        insert(_T).values(table_name=table, position=position, cells=list(row))
                    )

        self._run(write, f"write {table}")

    async def append_rows(self, table: str, rows: Sequence[Sequence[str]]) -> None:
        def append(session: Session) -> None:
            highest = session.scalar(
                select(func.max(_T.c.position)).where(_T.c.table_name == table)
            )
            start = 0 if highest is None else highest + 1
            for offset, row in enumerate(rows):
                session.execute(
                    insert(_T).values(table_name=table, position=start + offset, cells=list(row))
                )

        self._run(append, f"append {table}")

    async def delete_rows(self, table: str, indices: Sequence[int]) -> None:
        doomed = set(indices)

        def remove(session: Session) -> None:
            stmt = select(_T.c.position, _T.c.cells).where(_T.c.table_name == table)
            kept = [
                cells
                for position, cells in session.execute(stmt.order_by(_T.c.position))
                if position not in doomed
            ]
            session.execute(delete(_T).where(_T.c.table_name == table))
            for position, cells in enumerate(kept):
                session.execute(insert(_T).values(table_name=table, position=position, cells=cells))

        self._run(remove, f"delete from {table}")

    async def ensure_table(self, table: str, header: Sequence[str]) -> None:
        def ensure(session: Session) -> None:
            current = session.scalar(
                select(_T.c.cells).where(_T.c.table_name == table, _T.c.position == 0)
            )
            if current is None:
                session.execute(insert(_T).values(table_name=table, position=0, cells=list(header)))
                log.info("Created table %s", table)
            elif list(current) != list(header):
                session.execute(
                    update(_T)
                    .where(_T.c.table_name == table, _T.c.position == 0)
                    .values(cells=list(header))
                )

        self._run(ensure, f"ensure {table}")

    def _run[T](self, work: Callable[[Session], T], action: str) -> T:
        try:
            with self._session_factory() as session, session.begin():
                return work(session)
        except SQLAlchemyError as exc:
            raise StoreError(f"Tabular store failed to {action}: {exc}") from exc
