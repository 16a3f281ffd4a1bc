"""User service for business logic."""

from uuid import UUID

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash
from app.models.users import users


class UserService:
    """Service for user operations."""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        full_name: str,
        email: str,
        password: str,
        phone: str | None = None,
        role: str = "patient",
    ) -> dict:
        """Create a new user with a hashed password."""
        query = (
            insert(users)
            .values(
                full_name=full_name,
                email=email.lower(),
                phone=phone,
                password_hash=get_password_hash(password),
                role=role,
            )
            .returning(users)
        )

        result = await db.execute(query)
        await db.commit()
        user = result.mappings().first()

        if not user:
            raise ValueError("Failed to create user")

        return dict(user)

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> dict | None:
        """Get user by internal ID."""
        result = await db.execute(select(users).where(users.c.id == user_id))
        user = result.mappings().first()
        return dict(user) if user else None

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> dict | None:
        """Get user by (case-insensitive) email."""
        result = await db.execute(select(users).where(users.c.email == email.lower()))
        user = result.mappings().first()
        return dict(user) if user else None

    @staticmethod
    async def list_users(db: AsyncSession) -> list[dict]:
        """List every account, newest first."""
        result = await db.execute(select(users).order_by(users.c.created_at.desc()))
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def delete_user(db: AsyncSession, user_id: UUID) -> bool:
        """Delete a user (hard delete). Their appointments are kept."""
        result = await db.execute(delete(users).where(users.c.id == user_id))
        await db.commit()
        return result.rowcount > 0  # type: ignore[attr-defined]
