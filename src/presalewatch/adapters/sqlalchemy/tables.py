"""
SQLAlchemy table holding spreadsheet-style rows.
Every logical table (CryptoProjects, PriceHistory, SitesConfig) shares one
physical table; rows are addressed by (table_name, position).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, Integer, MetaData, String, Table, UniqueConstraint

if TYPE_CHECKING:
    from sqlalchemy import Engine

log = logging.getLogger(__name__)

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

tabular_row_table = Table(
    "tabular_row",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("table_name", String, nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("cells", JSON, nullable=False),
    UniqueConstraint("table_name", "position"),
)


def create_all_tables(engine: Engine) -> None:
    """Create all tables."""
    log.info("Creating all tables")
    metadata.create_all(engine)
