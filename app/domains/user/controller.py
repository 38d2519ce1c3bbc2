"""User authentication controller endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.dependencies import get_current_user
from app.database import get_db
from app.domains.user.service import UserService
from app.schemas.base import ResponseSchema
from app.schemas.user import (
    AuthResponse,
    UserLoginRequest,
    UserRegisterRequest,
    UserResponse,
    UserUpdateRequest,
)
from models.user import User

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def get_user_service(
    db: AsyncSession = Depends(get_db), config: Settings = Depends(get_settings)
) -> UserService:
    return UserService(db, config)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: UserRegisterRequest, service: UserService = Depends(get_user_service)
):
    """Create an account and sign it in."""
    user, token = await service.register(
        email=str(register_data.email),
        password=register_data.password,
        name=register_data.name,
    )
    return AuthResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(login_data: UserLoginRequest, service: UserService = Depends(get_user_service)):
    """Exchange email and password for an access token."""
    user, token = await service.login(str(login_data.email), login_data.password)
    return AuthResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return UserResponse.model_validate(current_user)


@router.put("/me", response_model=UserResponse)
async def update_current_user(
    update_data: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Update current user information."""
    user = await service.update_user(
        current_user.id,
        name=update_data.name,
        email=str(update_data.email) if update_data.email else None,
    )
    return UserResponse.model_validate(user)


@router.delete("/me", response_model=ResponseSchema)
async def delete_current_user(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Delete the account; its files are removed from listings."""
    await service.delete_user(current_user.id)
    return ResponseSchema(status="success", message="Account deleted successfully")
