"""File metadata repository."""

from typing import Any, Iterable

from sqlalchemy import desc, func, select
from sqlalchemy.sql.expression import ColumnElement

from app.repositories.soft_delete import SoftDeleteRepository
from models.file import File


class FileRepository(SoftDeleteRepository[File]):
    """File metadata rows; ownership never changes after creation."""

    model = File

    async def update(self, record_id: Any, **values: Any) -> File | None:
        if "user_id" in values:
            raise ValueError("File owner cannot be changed")
        return await super().update(record_id, **values)

    async def list_for_user(
        self, user_id: Any, *criteria: ColumnElement[bool]
    ) -> list[File]:
        """Active files of one user, newest first."""
        return await self.find_many(
            File.user_id == user_id,
            *criteria,
            order_by=[desc(File.created_at)],
        )

    async def total_size_for_user(self, user_id: Any) -> int:
        return await self.sum(File.size, File.user_id == user_id)

    async def mark_deleted_for_owners(self, owner_ids: Iterable[Any]) -> int:
        """Tombstone the active files of the given owners without committing."""
        return await self._mark_deleted([File.user_id.in_(owner_ids)])

    async def usage_by_mime_type(self, user_id: Any) -> list[tuple[str, int, int]]:
        """``(mime_type, count, total_size)`` of a user's active files."""
        stmt = (
            select(File.mime_type, func.count(File.id), func.coalesce(func.sum(File.size), 0))
            .where(*self.scope([File.user_id == user_id]))
            .group_by(File.mime_type)
        )
        result = await self.db.execute(stmt)
        return [(mime_type, int(count), int(size)) for mime_type, count, size in result.all()]
