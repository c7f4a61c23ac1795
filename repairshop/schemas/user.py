"""User and authentication schemas."""

from datetime import datetime

from pydantic import Field

from repairshop.schemas.base import CamelModel


class GoogleAuthRequest(CamelModel):
    """Identity-provider token to exchange for a service token."""

    id_token: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """Schema for user response."""

    id: str
    email: str
    name: str | None = None
    is_admin: bool
    created_at: datetime | None = None


class TokenResponse(CamelModel):
    """Service access token and the signed-in user."""

    token: str
    token_type: str = "bearer"
    user: UserResponse
