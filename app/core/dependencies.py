# app/core/dependencies.py
import logging
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.security import TokenAuthenticator
from app.database import get_db
from app.domains.file.service import FileService
from app.exceptions.user import AuthTokenError
from app.repositories.user import UserRepository
from app.storage.service import StorageService
from models import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_authenticator(config: Settings = Depends(get_settings)) -> TokenAuthenticator:
    return TokenAuthenticator(config)


async def validate_token(
    token: HTTPAuthorizationCredentials | None = Depends(security),
    auth: TokenAuthenticator = Depends(get_authenticator),
) -> dict:
    """Validate and decode the bearer token.

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: If the token is missing, invalid or expired
    """
    if not token or not token.credentials:
        raise _unauthorized("Authentication token is required")

    try:
        return auth.verify_token(token.credentials)
    except AuthTokenError as e:
        logger.info("Token validation failed: %s", e.message)
        raise _unauthorized(e.message) from e


async def get_current_user(
    request: Request,
    payload: dict = Depends(validate_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get the active user the token was issued for.

    Raises:
        HTTPException: If the subject is malformed, unknown or deleted
    """
    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError as e:
        raise _unauthorized("Invalid token payload - missing user ID") from e

    user = await UserRepository(db).get(user_id)
    if user is None:
        raise _unauthorized("User not found")

    # Add user info to request state for logging
    request.state.user_id = user.id
    return user


def get_storage_service(request: Request) -> StorageService:
    """The storage service built once at application startup."""
    return request.app.state.storage


def get_file_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    config: Settings = Depends(get_settings),
) -> FileService:
    return FileService(db, storage, config)
