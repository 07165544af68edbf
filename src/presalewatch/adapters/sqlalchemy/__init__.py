"""SQLAlchemy adapter for the tabular store port."""

from __future__ import annotations

from .store import SqlAlchemyTabularStore
from .tables import create_all_tables, metadata, tabular_row_table

__all__ = ["SqlAlchemyTabularStore", "create_all_tables", "metadata", "tabular_row_table"]
