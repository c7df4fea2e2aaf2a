"""
Core user service functionality.

Handles user retrieval and the level/rank read used by the profile view.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.referral.rank_calculator import RankCalculator, RankResult
from app.utils.exceptions import NotFoundError


class UserServiceCore:
    """
    Core user service.

    Provides basic user retrieval methods.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize user service core.

        Args:
            session: Database session
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.rank_calculator = RankCalculator(session)

    async def get_by_id(self, user_id: int) -> User | None:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User or None
        """
        return await self.user_repo.get_by_id(user_id)

    async def require_user(self, user_id: int) -> User:
        """
        Get a user re-read from the database.

        Raises:
            NotFoundError: Unknown user
        """
        user = await self.user_repo.get_fresh(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_level_and_rank(self, user_id: int) -> RankResult:
        """
        Recompute (when active) and return a user's level and rank.

        Inactive users keep whatever is stored; nothing is written.
        """
        user = await self.require_user(user_id)
        result = await self.rank_calculator.recompute_level_and_rank(user_id)
        if result.skipped:
            return RankResult(
                user_id=user_id,
                level=user.level,
                rank=user.rank,
                skipped=True,
            )
        return result
