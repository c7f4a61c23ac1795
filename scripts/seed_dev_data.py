#!/usr/bin/env python3
"""Load the demo customer, cars and bookings into the configured database."""

import asyncio

from repairshop.database import close_db, get_db_context, init_db
from repairshop.repositories.seed import seed_demo_data
from repairshop.repositories.sql import SQLAlchemyStore


async def main(create_tables: bool) -> None:
    if create_tables:
        await init_db()

    async with get_db_context() as session:
        inserted = await seed_demo_data(SQLAlchemyStore(session))

    await close_db()
    print("Demo data inserted" if inserted else "Demo data already present")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed development data")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables first (instead of running Alembic)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.create_tables))
