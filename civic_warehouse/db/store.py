"""Storage abstraction over the warehouse engine.

The ETL and analytics layers receive a ``Warehouse`` instead of reaching for a
process-wide engine, so both can run against Postgres in production and an
in-memory SQLite database in tests.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from civic_warehouse.errors import TransactionFailure
from civic_warehouse.models.warehouse import WarehouseBase

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class Warehouse:
    """Unit-of-work factory bound to one engine."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Scoped transaction: commits on success, rolls back on any exception.

        Store-level failures are re-raised as TransactionFailure; any other
        exception propagates unchanged after the rollback.
        """
        try:
            with self._sessions.begin() as session:
                yield session
        except SQLAlchemyError as e:
            raise TransactionFailure(str(e)) from e

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Plain session for read-only queries."""
        session = self._sessions()
        try:
            yield session
        finally:
            session.close()

    def create_schema(self) -> None:
        WarehouseBase.metadata.create_all(self.engine)


def insert_ignore(session: Session, model: type[WarehouseBase], values: dict[str, Any]) -> int:
    """INSERT ... ON CONFLICT DO NOTHING.

    Returns the number of rows written: 0 means a row with the same key
    (primary key or any unique column) already existed.
    """
    dialect = session.get_bind().dialect.name
    try:
        insert = _INSERT_BY_DIALECT[dialect]
    except KeyError:
        raise NotImplementedError(f"insert_ignore is not supported on {dialect}") from None

    stmt = insert(model.__table__).values(**values).on_conflict_do_nothing()
    result = session.execute(stmt)
    return result.rowcount
