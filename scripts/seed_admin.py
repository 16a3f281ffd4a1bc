#!/usr/bin/env python3
"""
Create the first admin account, or promote an existing user to admin.

Usage:
    python scripts/seed_admin.py --email admin@example.com
    python scripts/seed_admin.py --email admin@example.com --name "Front Desk" --mobile 9999999999

Environment Variables:
    ADMIN_PASSWORD: Password for a newly created admin (required when the user does not exist)
"""

import argparse
import asyncio
import os
import sys

import dotenv
from sqlalchemy import update

dotenv.load_dotenv()

from app.database import AsyncSessionLocal, engine  # noqa: E402
from app.models.users import users  # noqa: E402
from app.services.user_service import UserService  # noqa: E402


async def seed_admin(email: str, name: str, mobile: str | None) -> None:
    """Ensure an admin account exists for ``email``."""
    async with AsyncSessionLocal() as session:
        existing = await UserService.get_user_by_email(session, email)

        if existing:
            print(f"User {email} already exists")
            if existing["role"] != "admin":
                await session.execute(
                    update(users).where(users.c.id == existing["id"]).values(role="admin")
                )
                await session.commit()
                print("✓ Promoted existing user to admin")
            return

        password = os.getenv("ADMIN_PASSWORD")
        if not password:
            print("Error: ADMIN_PASSWORD environment variable not set", file=sys.stderr)
            sys.exit(1)

        await UserService.create_user(
            session,
            full_name=name,
            email=email,
            password=password,
            phone=mobile,
            role="admin",
        )
        print(f"✓ Admin user {email} created successfully")


async def run(email: str, name: str, mobile: str | None) -> None:
    try:
        await seed_admin(email, name, mobile)
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed an admin account")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--name", default="System Admin", help="Display name")
    parser.add_argument("--mobile", default=None, help="Contact number")
    args = parser.parse_args()

    asyncio.run(run(args.email, args.name, args.mobile))


if __name__ == "__main__":
    main()
