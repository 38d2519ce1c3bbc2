"""Security related functions."""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from app.core.config import Settings, get_settings
from app.exceptions.user import AuthTokenError

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Malformed or unknown hash format
        return False


class TokenAuthenticator:
    """
    Issues and verifies the application's access tokens.

    Tokens are HS256 JWTs signed with the configured secret key and carry the
    user id in ``sub`` plus the email the account had when the token was issued.

    :ivar secret_key: The secret key used to sign and verify tokens.
    :type secret_key: str
    :ivar algorithm: The JWT signing algorithm.
    :type algorithm: str
    :ivar expire_minutes: Token lifetime in minutes.
    :type expire_minutes: int
    """

    def __init__(self, config: Settings | None = None):
        config = config or get_settings()
        self.secret_key = config.secret_key
        self.algorithm = config.algorithm
        self.expire_minutes = config.access_token_expire_minutes

    def create_access_token(self, subject: Any, email: str | None = None) -> str:
        """Create a signed access token for the given user id."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject),
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        if email is not None:
            payload["email"] = email
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> dict:
        """
        Verify the signature and expiry of a token and return its payload.

        :param token: The encoded JWT.
        :return: The decoded claims.
        :raises AuthTokenError: If the token is expired, tampered with or malformed.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthTokenError(f"Invalid authentication token: {e}") from e

        return payload
