"""User-related Pydantic schemas for request/response validation."""

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .base import RecordSchema, BaseSchema


class UserRegisterRequest(BaseSchema):
    """Schema for user registration request."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=128, description="Account password")
    name: Optional[str] = Field(None, max_length=100, description="Display name")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class UserLoginRequest(BaseSchema):
    """Schema for user login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdateRequest(BaseSchema):
    """Schema for updating user information."""

    name: Optional[str] = Field(None, max_length=100, description="Name to update")
    email: Optional[EmailStr] = Field(None, description="Email to update")


class UserResponse(RecordSchema):
    """Schema for user response data."""

    email: str
    name: Optional[str] = None


class AuthResponse(BaseSchema):
    """Schema for authentication response."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
