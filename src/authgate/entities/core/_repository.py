"""Shared data access for the identity variants.

Every variant is keyed by a natural key and written through
``insert_if_absent`` so concurrent first contact never produces two rows.
"""

from typing import Any, ClassVar, Generic, TypeVar

from loguru import logger
from pydantic import BaseModel
from sqlalchemy import exists, insert, update
from sqlalchemy import select as sa_select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, select

from src.authgate.entities.core._base import utc_now

E = TypeVar("E", bound=BaseModel)
T = TypeVar("T", bound=SQLModel)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class IdentityRepository(Generic[E, T]):
    """Data-access layer for one identity variant."""

    entity_type: ClassVar[type[BaseModel]]
    table_type: ClassVar[type[SQLModel]]
    key_column: ClassVar[str]

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def _table(self):
        return self.table_type.__table__

    def _to_entity(self, row: T | None) -> E | None:
        if row is None:
            return None
        return self.entity_type.model_validate(row, from_attributes=True)

    def get(self, key: str) -> E | None:
        row = self._session.get(self.table_type, key, populate_existing=True)
        return self._to_entity(row)

    def get_by(self, column: str, value: str) -> E | None:
        statement = select(self.table_type).where(
            getattr(self.table_type, column) == value
        )
        row = self._session.exec(statement).first()
        return self._to_entity(row)

    def value_exists(self, column: str, value: str) -> bool:
        statement = sa_select(exists().where(self._table.c[column] == value))
        return bool(self._session.execute(statement).scalar())

    def insert_if_absent(self, values: dict[str, Any]) -> bool:
        """Insert a row unless one with the same natural key exists.

        Returns True when this call created the row. Conflicts on any other
        unique column still raise ``IntegrityError``.
        """
        dialect = self._session.get_bind().dialect.name
        dialect_insert = _UPSERT_DIALECTS.get(dialect)
        if dialect_insert is not None:
            statement = (
                dialect_insert(self._table)
                .values(**values)
                .on_conflict_do_nothing(index_elements=[self.key_column])
            )
            result = self._session.execute(statement)
            return result.rowcount == 1

        key = values[self.key_column]
        try:
            with self._session.begin_nested():
                self._session.execute(insert(self._table).values(**values))
        except IntegrityError:
            if self.get(key) is None:
                raise
            logger.debug("Lost insert race on {} {}", self.key_column, key)
            return False
        return True

    def refresh(self, key: str, values: dict[str, Any]) -> None:
        """Update mutable fields and bump last_seen_at."""
        statement = (
            update(self._table)
            .where(self._table.c[self.key_column] == key)
            .values(**values, last_seen_at=utc_now())
        )
        self._session.execute(statement)
