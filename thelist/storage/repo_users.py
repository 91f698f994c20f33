"""Repository for user operations."""

from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from thelist.storage.models import User


class UsersRepo:
    """Repository for user registration and lookups."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user(self, user_id: str) -> User | None:
        """Get user by ID, or None if the user never registered."""
        stmt = select(User).where(User.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create_user(self, user_id: str, display_name: str | None = None) -> User:
        """Get existing user or register a new one.

        Args:
            user_id: Telegram user ID as string
            display_name: Name shown in greetings

        Returns:
            User instance (new or existing)
        """
        user = await self.get_user(user_id)
        if user is not None:
            return user

        now = datetime.now(timezone.utc)
        user = User(
            user_id=user_id,
            display_name=display_name,
            created_at=now,
            last_seen_at=now,
        )
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def update_last_seen(self, user_id: str) -> None:
        """Update user's last seen timestamp."""
        now = datetime.now(timezone.utc)
        stmt = update(User).where(User.user_id == user_id).values(last_seen_at=now)
        await self.session.execute(stmt)
        await self.session.commit()

    async def count_users(self) -> int:
        """Total registered users."""
        result = await self.session.execute(select(func.count()).select_from(User))
        return result.scalar() or 0
