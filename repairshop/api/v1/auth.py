"""Authentication endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from repairshop.api.deps import CurrentUser, get_identity_provider, get_user_service
from repairshop.core.identity import IdentityProvider
from repairshop.core.security import create_user_token
from repairshop.schemas.user import GoogleAuthRequest, TokenResponse, UserResponse
from repairshop.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/google", response_model=TokenResponse)
async def google_sign_in(
    request: GoogleAuthRequest,
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> TokenResponse:
    """Exchange a Firebase ID token for a service access token."""
    identity = await provider.verify(request.id_token)
    user = await users.get_or_create(identity)
    logger.info(f"User {user.id} signed in")

    return TokenResponse(
        token=create_user_token(user.id, user.email),
        user=UserResponse.model_validate(user),
    )


@router.get("/verify", response_model=UserResponse)
async def verify(current_user: CurrentUser) -> UserResponse:
    """Check that the bearer token is valid."""
    return UserResponse.model_validate(current_user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser) -> UserResponse:
    """Get the signed-in user."""
    return UserResponse.model_validate(current_user)
