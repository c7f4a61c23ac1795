"""API dependencies for authentication, storage and services."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from repairshop.config import settings
from repairshop.core.exceptions import ForbiddenError, UnauthenticatedError
from repairshop.core.identity import IdentityProvider, identity_provider
from repairshop.core.security import verify_token
from repairshop.database import get_db_context
from repairshop.models.user import User
from repairshop.repositories.base import RepairShopStore
from repairshop.repositories.memory import memory_store
from repairshop.repositories.sql import SQLAlchemyStore
from repairshop.services.booking_service import BookingService
from repairshop.services.notification_service import NotificationService, notification_service
from repairshop.services.user_service import UserService
from repairshop.services.vehicle_service import VehicleService

# Security scheme; missing credentials are reported as our own 401
security = HTTPBearer(auto_error=False)


async def get_store() -> AsyncGenerator[RepairShopStore, None]:
    """Request-scoped store.

    With the SQL backend the session is committed when the handler returns
    and rolled back if it raises.
    """
    if settings.storage_backend == "memory":
        yield memory_store
        return

    async with get_db_context() as session:
        yield SQLAlchemyStore(session)


def get_identity_provider() -> IdentityProvider:
    return identity_provider


def get_notification_service() -> NotificationService:
    return notification_service


def get_user_service(
    store: Annotated[RepairShopStore, Depends(get_store)],
) -> UserService:
    return UserService(store)


def get_booking_service(
    store: Annotated[RepairShopStore, Depends(get_store)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
) -> BookingService:
    return BookingService(store, notifier)


def get_vehicle_service(
    store: Annotated[RepairShopStore, Depends(get_store)],
) -> VehicleService:
    return VehicleService(store)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[RepairShopStore, Depends(get_store)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> User:
    """Resolve the bearer token to a user.

    A service JWT is tried first. Anything else is verified as an identity
    provider token and the user is created on first sight.
    """
    if not credentials:
        raise UnauthenticatedError("Not authenticated")
    token = credentials.credentials

    try:
        payload = verify_token(token, token_type="access")
    except UnauthenticatedError:
        payload = None

    if payload is not None:
        user = await store.get_user(payload["sub"])
        if not user:
            raise UnauthenticatedError("User not found")
        return user

    identity = await provider.verify(token)
    return await UserService(store).get_or_create(identity)


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are an admin."""
    if not current_user.is_admin:
        raise ForbiddenError("Admin access required")
    return current_user


CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentAdmin = Annotated[User, Depends(get_current_admin)]
