"""Soft-delete aware data access.

Every entity with a ``deleted_at`` marker is reached through a subclass of
``SoftDeleteRepository``, so the same rules apply to all of them:

* reads (find, get, count, sum) only see active rows unless the caller's own
  criteria mention ``deleted_at``;
* ``delete`` / ``delete_many`` set the marker instead of removing rows;
* ``force_delete``, ``restore`` and the ``*_with_deleted`` finders are the
  explicit ways around those defaults;
* ``create`` and ``update`` are passed through untouched.
"""

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select, visitors
from sqlalchemy.sql.expression import ColumnClause, ColumnElement

from models.base import SOFT_DELETE_FIELD, utcnow

ModelT = TypeVar("ModelT")


def any_deletion_state(model) -> ColumnElement[bool]:
    """Criterion matching both active and tombstoned rows.

    Passing it to a read opts that read out of the active-only default.
    """
    marker = getattr(model, SOFT_DELETE_FIELD)
    return or_(marker.is_(None), marker.is_not(None))


class SoftDeleteRepository(Generic[ModelT]):
    """Base repository applying the soft-delete rules to one model."""

    model: type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    # ----- scoping -----------------------------------------------------------

    @property
    def marker(self):
        return getattr(self.model, SOFT_DELETE_FIELD)

    def mentions_marker(self, criteria: Sequence[ColumnElement[bool]]) -> bool:
        """True if any criterion references this model's ``deleted_at`` column."""
        table = self.model.__table__
        for criterion in criteria:
            for element in visitors.iterate(criterion):
                if (
                    isinstance(element, ColumnClause)
                    and element.key == SOFT_DELETE_FIELD
                    and getattr(element, "table", None) is not None
                    and element.table.name == table.name
                ):
                    return True
        return False

    def scope(self, criteria: Sequence[ColumnElement[bool]]) -> list[ColumnElement[bool]]:
        """Add ``deleted_at IS NULL`` unless the caller filters on the marker."""
        scoped = list(criteria)
        if not self.mentions_marker(scoped):
            scoped.append(self.marker.is_(None))
        return scoped

    def _select(
        self,
        criteria: Sequence[ColumnElement[bool]],
        order_by: Sequence[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Select:
        stmt = select(self.model).where(*criteria).execution_options(populate_existing=True)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    # ----- reads ---------------------------------------------------------------

    async def find_many(
        self,
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[ModelT]:
        stmt = self._select(self.scope(criteria), order_by, limit, offset)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_one(self, *criteria: ColumnElement[bool]) -> ModelT | None:
        result = await self.db.execute(self._select(self.scope(criteria), limit=1))
        return result.scalars().first()

    async def get(self, record_id: Any) -> ModelT | None:
        return await self.find_one(self.model.id == record_id)

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        stmt = select(func.count()).select_from(self.model).where(*self.scope(criteria))
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def sum(self, column, *criteria: ColumnElement[bool]) -> int:
        stmt = select(func.coalesce(func.sum(column), 0)).where(*self.scope(criteria))
        result = await self.db.execute(stmt)
        return int(result.scalar() or 0)

    async def find_many_with_deleted(
        self,
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[ModelT]:
        """Like ``find_many`` but also returns tombstoned rows."""
        stmt = self._select(list(criteria), order_by, limit, offset)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_one_with_deleted(self, *criteria: ColumnElement[bool]) -> ModelT | None:
        result = await self.db.execute(self._select(list(criteria), limit=1))
        return result.scalars().first()

    # ----- writes --------------------------------------------------------------

    async def create(self, **values: Any) -> ModelT:
        instance = self.model(**values)
        self.db.add(instance)
        await self._commit()
        await self.db.refresh(instance)
        return instance

    async def update(self, record_id: Any, **values: Any) -> ModelT | None:
        instance = await self.get(record_id)
        if instance is None:
            return None

        for field, value in values.items():
            setattr(instance, field, value)
        await self._commit()
        await self.db.refresh(instance)
        return instance

    async def delete(self, record_id: Any) -> ModelT | None:
        """Soft delete: mark the active row and return it."""
        instance = await self.get(record_id)
        if instance is None:
            return None

        setattr(instance, SOFT_DELETE_FIELD, utcnow())
        await self._commit()
        await self.db.refresh(instance)
        return instance

    async def delete_many(self, *criteria: ColumnElement[bool]) -> int:
        """Soft delete every active row matching the criteria."""
        rowcount = await self._mark_deleted(criteria)
        await self._commit()
        return rowcount

    async def force_delete(self, record_id: Any) -> bool:
        """Permanently remove the row, whatever its marker says."""
        result = await self._execute_write(delete(self.model).where(self.model.id == record_id))
        await self._commit()
        return result.rowcount > 0

    async def restore(self, record_id: Any) -> ModelT | None:
        """Clear the marker of a tombstoned row."""
        instance = await self.find_one_with_deleted(self.model.id == record_id)
        if instance is None:
            return None

        setattr(instance, SOFT_DELETE_FIELD, None)
        await self._commit()
        await self.db.refresh(instance)
        return instance

    # ----- helpers -------------------------------------------------------------

    async def _mark_deleted(self, criteria: Sequence[ColumnElement[bool]]) -> int:
        stmt = (
            update(self.model)
            .where(*criteria, self.marker.is_(None))
            .values({SOFT_DELETE_FIELD: utcnow()})
            .execution_options(synchronize_session=False)
        )
        result = await self._execute_write(stmt)
        return result.rowcount

    async def _execute_write(self, stmt):
        try:
            return await self.db.execute(stmt)
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
