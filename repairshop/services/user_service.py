"""User registry backed by identity-provider claims."""

import logging

from repairshop.core.identity import IdentityClaims
from repairshop.models.user import User
from repairshop.repositories.base import RepairShopStore

logger = logging.getLogger(__name__)


class UserService:
    """Creates users lazily on their first successful sign-in."""

    def __init__(self, store: RepairShopStore) -> None:
        self.store = store

    async def get_or_create(self, identity: IdentityClaims) -> User:
        """Return the user for a verified identity, creating it if needed.

        E-mail and display name are refreshed from the identity provider.
        The admin flag is never touched here.
        """
        user = await self.store.get_user(identity.uid)
        if user is None:
            user = User(
                id=identity.uid,
                email=identity.email,
                name=identity.name,
                is_admin=False,
            )
            await self.store.add_user(user)
            logger.info(f"Created user {user.id} ({user.email})")
            return user

        changed = False
        if identity.email and identity.email != user.email:
            user.email = identity.email
            changed = True
        if identity.name and identity.name != user.name:
            user.name = identity.name
            changed = True
        if changed:
            await self.store.save_user(user)
        return user

    async def set_admin(self, user_id: str, is_admin: bool = True) -> User | None:
        """Grant or revoke admin access. Returns None when the user is unknown."""
        user = await self.store.get_user(user_id)
        if user is None:
            return None
        user.is_admin = is_admin
        await self.store.save_user(user)
        logger.info(f"User {user_id} admin={is_admin}")
        return user
