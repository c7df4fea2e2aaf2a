"""
Rank/level calculator.

A user reaches level L when at least three active direct referrals have
each reached level L - 1 (capped at MAX_LEVEL). Inactive users sit at
level 0. The downline is walked layer by layer, one query per layer, and
never deeper than MAX_LEVEL below the subject.
"""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import level_to_rank
from app.config.settings import settings
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.referral.config import (
    DOWNLINE_BATCH_SIZE,
    RANK_MAX_LEVEL,
    RANK_REQUIRED_DIRECTS,
)
from app.utils.exceptions import NotFoundError


@dataclass
class RankResult:
    """Outcome of a level/rank recomputation."""

    user_id: int
    level: int
    rank: str
    changed: bool = False
    skipped: bool = False  # Subject below the activity threshold


class RankCalculator:
    """Compute and persist level/rank from the active downline."""

    def __init__(
        self,
        session: AsyncSession,
        threshold: Decimal | None = None,
    ) -> None:
        """
        Initialize rank calculator.

        Args:
            session: Async database session
            threshold: Activity threshold (defaults to settings)
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.threshold = (
            threshold if threshold is not None else settings.activity_threshold
        )

    async def compute_level(self, user: User) -> int:
        """
        Compute a user's level without writing anything.

        Args:
            user: Subject

        Returns:
            Level 0..MAX_LEVEL
        """
        if not user.is_active(self.threshold):
            return 0

        # layers[d] holds the active users d levels below the subject
        layers: list[list[int]] = [[user.id]]
        children_of: dict[int, list[int]] = {}
        visited = {user.id}

        for _ in range(RANK_MAX_LEVEL):
            frontier = layers[-1]
            active = await self._active_children(frontier)

            next_layer: list[int] = []
            for parent_id in frontier:
                kids = []
                for child_id in active.get(parent_id, []):
                    if child_id in visited:
                        logger.error(
                            "Referral cycle detected in downline",
                            extra={"user_id": user.id, "repeated_id": child_id},
                        )
                        continue
                    visited.add(child_id)
                    kids.append(child_id)
                children_of[parent_id] = kids
                next_layer.extend(kids)

            if not next_layer:
                break
            layers.append(next_layer)

        # Bottom-up: a node at depth d can contribute at most MAX_LEVEL - d
        levels: dict[int, int] = {}
        for depth in range(len(layers) - 1, -1, -1):
            cap = RANK_MAX_LEVEL - depth
            for node_id in layers[depth]:
                kids = children_of.get(node_id, [])
                if cap <= 0 or len(kids) < RANK_REQUIRED_DIRECTS:
                    levels[node_id] = 0
                    continue
                weakest = min(levels[kid] for kid in kids)
                levels[node_id] = min(cap, weakest + 1)

        return levels[user.id]

    async def recompute_level_and_rank(self, user_id: int) -> RankResult:
        """
        Recompute and persist a user's level and rank.

        Skipped for users below the activity threshold. Writes (and
        commits) only when the value changed.

        Args:
            user_id: Subject

        Returns:
            RankResult

        Raises:
            NotFoundError: Unknown user
        """
        user = await self.user_repo.get_fresh(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if not user.is_active(self.threshold):
            return RankResult(
                user_id=user_id,
                level=0,
                rank=level_to_rank(0),
                skipped=True,
            )

        level = await self.compute_level(user)
        rank = level_to_rank(level)

        if user.level == level and user.rank == rank:
            return RankResult(user_id=user_id, level=level, rank=rank)

        old_level = user.level
        await self.user_repo.set_level(user_id, level, rank)
        await self.session.commit()
        user.level = level
        user.rank = rank

        logger.info(
            f"Level changed for user {user_id}: {old_level} -> {level} ({rank})",
        )
        return RankResult(user_id=user_id, level=level, rank=rank, changed=True)

    async def _active_children(self, parent_ids: list[int]) -> dict[int, list[int]]:
        merged: dict[int, list[int]] = {}
        for start in range(0, len(parent_ids), DOWNLINE_BATCH_SIZE):
            batch = parent_ids[start:start + DOWNLINE_BATCH_SIZE]
            merged.update(
                await self.user_repo.get_active_children(batch, self.threshold)
            )
        return merged
