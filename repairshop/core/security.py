"""Service access tokens."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from repairshop.config import settings
from repairshop.core.exceptions import UnauthenticatedError


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = "access") -> dict[str, Any]:
    """Verify and decode a service JWT."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise UnauthenticatedError(f"Token validation failed: {str(e)}")
    if payload.get("type") != token_type or not payload.get("sub"):
        raise UnauthenticatedError("Invalid token payload")
    return payload


def create_user_token(user_id: str, email: str) -> str:
    """Access token issued after a successful identity exchange."""
    return create_access_token({"sub": user_id, "email": email})
