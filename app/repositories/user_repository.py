"""
User repository.

Data access layer for User model.
"""

from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email (case-insensitive).

        Args:
            email: Email address

        Returns:
            User or None
        """
        return await self.get_by(email=email.strip().lower())

    async def get_by_referral_code(
        self, referral_code: str
    ) -> User | None:
        """
        Get user by referral code.

        Args:
            referral_code: Invite code

        Returns:
            User or None
        """
        return await self.get_by(referral_code=referral_code.strip().upper())

    async def get_active_children(
        self, parent_ids: list[int], threshold: Decimal
    ) -> dict[int, list[int]]:
        """
        Direct referrals at or above the activity threshold, grouped by parent.

        Args:
            parent_ids: Parents to look up (one query for the whole layer)
            threshold: Activity threshold

        Returns:
            Dict parent_id -> list of active child ids (parents without
            active children are absent)
        """
        if not parent_ids:
            return {}
        stmt = (
            select(User.id, User.parent_id)
            .where(
                User.parent_id.in_(parent_ids),
                User.balance >= threshold,
            )
            .order_by(User.id)
        )
        result = await self.session.execute(stmt)

        children: dict[int, list[int]] = {}
        for row in result:
            children.setdefault(row.parent_id, []).append(row.id)
        return children

    async def add_bonus(self, user_id: int, amount: Decimal) -> bool:
        """
        Atomically increment bonus_earned.

        Returns:
            True if the user row was updated
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(bonus_earned=User.bonus_earned + amount)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def increment_referrals_count(self, user_id: int) -> bool:
        """Atomically bump the direct-referral counter."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(referrals_count=User.referrals_count + 1)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def set_level(self, user_id: int, level: int, rank: str) -> None:
        """Persist a recomputed level/rank."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(level=level, rank=rank)
        )
        await self.session.execute(stmt)

    async def get_totals(self) -> dict[str, Decimal | int]:
        """
        Platform-wide user aggregates.

        Returns:
            Dict with total_users, sum_daily_profit, sum_bonus_earned
        """
        stmt = select(
            func.count(User.id),
            func.coalesce(func.sum(User.daily_profit), 0),
            func.coalesce(func.sum(User.bonus_earned), 0),
        )
        result = await self.session.execute(stmt)
        total_users, sum_daily, sum_bonus = result.one()
        return {
            "total_users": int(total_users or 0),
            "sum_daily_profit": Decimal(str(sum_daily)),
            "sum_bonus_earned": Decimal(str(sum_bonus)),
        }
