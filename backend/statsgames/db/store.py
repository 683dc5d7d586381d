"""Generic per-table record store over an async session factory.

Every call opens its own session and commits on success, so services can
be handed a store for each table they touch and stay ignorant of sessions.

Usage
-----
    stats_store = RecordStore(GameStats, session_factory)
    row = await stats_store.select_one(
        GameStats.user_id == user_id,
        GameStats.game_id == game_id,
    )
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.interfaces import ORMOption

from statsgames.core.exceptions import ConflictError
from statsgames.core.logging import get_logger
from statsgames.db.session import session_scope

logger = get_logger(__name__)

T = TypeVar("T")

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell a uniqueness violation apart from other integrity failures."""
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == "23505" or getattr(orig, "pgcode", None) == "23505":
        return True
    message = str(orig).lower()
    return "unique" in message or "duplicate key" in message


class RecordStore(Generic[T]):
    """CRUD access to a single table."""

    def __init__(
        self,
        model: type[T],
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self.model = model
        self._session_factory = session_factory

    @property
    def table_name(self) -> str:
        return self.model.__tablename__  # type: ignore[attr-defined,no-any-return]

    async def select(
        self,
        *filters: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        options: Sequence[ORMOption] = (),
    ) -> list[T]:
        """Return all rows matching ``filters`` in the given order."""
        stmt = select(self.model).where(*filters).order_by(*order_by).options(*options)
        async with session_scope(self._session_factory) as session:
            result = await session.execute(stmt)
            rows = list(result.scalars().all())

        logger.debug("Record select", table=self.table_name, count=len(rows))
        return rows

    async def select_one(
        self,
        *filters: ColumnElement[bool],
        options: Sequence[ORMOption] = (),
    ) -> T | None:
        """Return the single matching row, or ``None`` when there is none."""
        stmt = select(self.model).where(*filters).options(*options).limit(1)
        async with session_scope(self._session_factory) as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def insert(self, values: Mapping[str, Any]) -> T:
        """Insert one row and return it.

        Raises:
            ConflictError: The row violates a uniqueness constraint.
        """
        try:
            async with session_scope(self._session_factory) as session:
                instance = self.model(**values)
                session.add(instance)
                await session.flush()
                await session.refresh(instance)
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError(f"{self.table_name} row already exists") from e
            raise

        return instance

    async def upsert(
        self,
        values: Mapping[str, Any],
        conflict_keys: Iterable[str],
    ) -> T:
        """Insert, or update every non-key column on a ``conflict_keys`` collision."""
        keys = list(conflict_keys)
        async with session_scope(self._session_factory) as session:
            dialect = session.bind.dialect.name  # type: ignore[union-attr]
            make_insert = _UPSERT_INSERTS.get(dialect)
            if make_insert is None:
                raise NotImplementedError(f"upsert is not supported on {dialect}")

            stmt = make_insert(self.model).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=keys,
                set_={name: stmt.excluded[name] for name in values if name not in keys},
            )
            await session.execute(stmt)

            lookup = [getattr(self.model, key) == values[key] for key in keys]
            result = await session.execute(select(self.model).where(*lookup))
            return result.scalar_one()

    async def update(
        self,
        values: Mapping[str, Any],
        *filters: ColumnElement[bool],
    ) -> T | None:
        """Patch matching rows; return the first updated row or ``None``."""
        async with session_scope(self._session_factory) as session:
            await session.execute(update(self.model).where(*filters).values(**values))
            result = await session.execute(
                select(self.model).where(*filters).limit(1).execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

    async def delete(self, *filters: ColumnElement[bool]) -> int:
        """Delete matching rows and return how many went away."""
        async with session_scope(self._session_factory) as session:
            result = await session.execute(delete(self.model).where(*filters))
            count = result.rowcount or 0

        logger.debug("Record delete", table=self.table_name, count=count)
        return count
