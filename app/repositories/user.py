"""User repository."""

from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.sql.expression import ColumnElement

from app.repositories.file import FileRepository
from app.repositories.soft_delete import SoftDeleteRepository
from models.file import File
from models.user import User


class UserRepository(SoftDeleteRepository[User]):
    """Users, with deletions cascading to the files they own."""

    model = User

    async def get_by_email(self, email: str, include_deleted: bool = False) -> User | None:
        criterion = func.lower(User.email) == email.lower()
        if include_deleted:
            return await self.find_one_with_deleted(criterion)
        return await self.find_one(criterion)

    async def delete(self, record_id: Any) -> User | None:
        user = await self.get(record_id)
        if user is None:
            return None

        await FileRepository(self.db).mark_deleted_for_owners([user.id])
        return await super().delete(record_id)

    async def delete_many(self, *criteria: ColumnElement[bool]) -> int:
        owner_ids = select(User.id).where(*self.scope(criteria))
        await FileRepository(self.db).mark_deleted_for_owners(owner_ids)
        return await super().delete_many(*criteria)

    async def force_delete(self, record_id: Any) -> bool:
        await self._execute_write(delete(File).where(File.user_id == record_id))
        return await super().force_delete(record_id)
