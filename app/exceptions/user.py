"""User-related exceptions."""

from .base import BaseAppException, ConflictError, NotFoundError


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message=message, error_code="USER_NOT_FOUND")


class UserAlreadyExistsError(ConflictError):
    """Raised when registering an email that is already taken."""

    def __init__(self, email: str):
        super().__init__(
            message="Email already exists",
            error_code="AUTH_EMAIL_EXISTS",
            details={"email": email},
        )


class InvalidCredentialsError(BaseAppException):
    """Raised when login credentials do not match an active account."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, status_code=401, error_code="AUTH_INVALID_CREDENTIALS")


class AuthTokenError(BaseAppException):
    """Raised when a bearer token cannot be verified."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message, status_code=401, error_code="AUTH_TOKEN_INVALID")
