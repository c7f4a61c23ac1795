#!/usr/bin/env python3
"""Grant (or revoke) admin access for an existing user.

Users are created on their first sign-in, so the person must have signed in
once before they can be promoted.
"""

import asyncio
import sys

from sqlalchemy import select

from repairshop.database import AsyncSessionLocal, close_db
from repairshop.models.user import User
from repairshop.repositories.sql import SQLAlchemyStore
from repairshop.services.user_service import UserService


async def set_admin(uid: str | None, email: str | None, revoke: bool = False) -> int:
    """Update the admin flag; returns a process exit code."""
    async with AsyncSessionLocal() as session:
        if uid is None:
            result = await session.execute(select(User).where(User.email == email))
            users = list(result.scalars().all())
            if len(users) != 1:
                print(f"Expected exactly one user with email {email}, found {len(users)}")
                return 1
            uid = users[0].id

        user = await UserService(SQLAlchemyStore(session)).set_admin(uid, is_admin=not revoke)
        if user is None:
            print(f"No user with id {uid}. Ask them to sign in first.")
            return 1
        await session.commit()

        print(f"{'Revoked' if revoke else 'Granted'} admin access: {user.email} ({user.id})")

    await close_db()
    return 0


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Grant admin access to a user")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--uid", help="Identity provider uid")
    group.add_argument("--email", help="User email")
    parser.add_argument("--revoke", action="store_true", help="Remove admin access instead")

    args = parser.parse_args()

    sys.exit(asyncio.run(set_admin(uid=args.uid, email=args.email, revoke=args.revoke)))
