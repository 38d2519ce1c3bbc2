# app/domains/user/service.py
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.security import TokenAuthenticator, hash_password, verify_password
from app.exceptions.user import InvalidCredentialsError, UserAlreadyExistsError, UserNotFoundError
from app.repositories.user import UserRepository
from models import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession, config: Settings | None = None):
        self.db = db
        self.users = UserRepository(db)
        self.auth = TokenAuthenticator(config or get_settings())

    def issue_token(self, user: User) -> str:
        return self.auth.create_access_token(user.id, email=user.email)

    async def register(self, email: str, password: str, name: str | None = None) -> tuple[User, str]:
        """Create an account and return it with a fresh access token.

        Emails of deleted accounts stay reserved.
        """
        email = email.lower()
        if await self.users.get_by_email(email, include_deleted=True):
            raise UserAlreadyExistsError(email)

        try:
            user = await self.users.create(
                email=email, password_hash=hash_password(password), name=name
            )
        except IntegrityError as e:
            # Lost a race against a concurrent registration
            raise UserAlreadyExistsError(email) from e

        logger.info("User registered", extra={"user_id": str(user.id)})
        return user, self.issue_token(user)

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials of an active account and issue a token."""
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        logger.info("User logged in", extra={"user_id": str(user.id)})
        return user, self.issue_token(user)

    async def get_user_by_id(self, user_id: UUID) -> User:
        """Get an active user by ID."""
        user = await self.users.get(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    async def update_user(
        self, user_id: UUID, name: str | None = None, email: str | None = None
    ) -> User:
        """Update user information."""
        user = await self.get_user_by_id(user_id)

        values = {}
        if name is not None:
            values["name"] = name
        if email is not None and email.lower() != user.email:
            email = email.lower()
            if await self.users.get_by_email(email, include_deleted=True):
                raise UserAlreadyExistsError(email)
            values["email"] = email

        if not values:
            return user

        try:
            return await self.users.update(user_id, **values)
        except IntegrityError as e:
            raise UserAlreadyExistsError(values.get("email", "")) from e

    async def delete_user(self, user_id: UUID) -> User:
        """Soft delete the account together with the metadata of its files."""
        user = await self.users.delete(user_id)
        if user is None:
            raise UserNotFoundError()

        logger.info("User deleted", extra={"user_id": str(user_id)})
        return user
