"""Sync engine for the warehouse database.

Used by the ETL pipeline for writes, by the FastAPI layer for dashboard
queries, and by Alembic migrations.
"""

from functools import lru_cache
from typing import Iterator

from sqlalchemy import Engine, create_engine

from civic_warehouse.config import settings
from civic_warehouse.db.store import Warehouse


@lru_cache(maxsize=1)
def get_warehouse_engine() -> Engine:
    return create_engine(
        settings.warehouse_db_url_sync,
        echo=False,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        execution_options={"schema_translate_map": {None: settings.warehouse_db_schema}},
    )


@lru_cache(maxsize=1)
def get_warehouse() -> Warehouse:
    return Warehouse(get_warehouse_engine())


def get_warehouse_dependency() -> Iterator[Warehouse]:
    """FastAPI dependency; overridden in tests."""
    yield get_warehouse()
