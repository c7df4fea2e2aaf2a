"""
Referral chain management module.

Handles upline walks and the parent link created at registration.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.referral.config import REFERRAL_DEPTH


class ReferralChainManager:
    """Manages referral chain operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chain manager."""
        self.session = session
        self.user_repo = UserRepository(session)

    async def get_referral_chain(
        self, user_id: int, depth: int = REFERRAL_DEPTH
    ) -> list[User]:
        """
        Get the upline of a user, nearest first.

        Walks parent_id one level at a time. Stops early at a missing
        ancestor; a repeated id (cycle) also stops the walk.

        Args:
            user_id: User ID
            depth: Maximum number of ancestors

        Returns:
            List of users from direct parent to Nth level
        """
        user = await self.user_repo.get_fresh(user_id)
        if user is None:
            return []

        chain: list[User] = []
        visited = {user.id}
        parent_id = user.parent_id

        while parent_id is not None and len(chain) < depth:
            if parent_id in visited:
                logger.error(
                    "Referral cycle detected",
                    extra={"user_id": user_id, "repeated_id": parent_id},
                )
                break

            parent = await self.user_repo.get_fresh(parent_id)
            if parent is None:
                logger.warning(
                    "Referral parent missing",
                    extra={"user_id": user_id, "parent_id": parent_id},
                )
                break

            visited.add(parent.id)
            chain.append(parent)
            parent_id = parent.parent_id

        logger.debug(
            "Referral chain retrieved",
            extra={
                "user_id": user_id,
                "depth": depth,
                "chain_length": len(chain)
            },
        )

        return chain

    async def link_parent(self, new_user: User, parent: User) -> tuple[bool, str | None]:
        """
        Attach a newly registered user under a parent.

        Args:
            new_user: Freshly created (flushed) user
            parent: Referring user

        Returns:
            Tuple of (success, error_message)
        """
        if new_user.id == parent.id:
            return False, "User cannot refer themselves"

        new_user.parent_id = parent.id
        await self.user_repo.increment_referrals_count(parent.id)
        await self.session.flush()

        logger.info(
            "Referral link created",
            extra={"user_id": new_user.id, "parent_id": parent.id},
        )
        return True, None
