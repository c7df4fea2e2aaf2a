"""
Commission distributor.

Walks the upline of a user whose deposit was just credited and records a
commission for each of up to REFERRAL_DEPTH ancestors: credited (paid) for
ancestors at or above the activity threshold, recorded as pending for the
rest. Each ancestor is settled in its own transaction; one failing ancestor
never undoes the others or the deposit that triggered the walk.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.enums import HistoryEntryType, HistoryStatus
from app.models.user import User
from app.repositories.referral_history_repository import (
    ReferralHistoryRepository,
)
from app.repositories.user_repository import UserRepository
from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.config import REFERRAL_DEPTH, REFERRAL_RATES
from app.services.referral.rank_calculator import RankCalculator


@dataclass
class CommissionEntry:
    """One settled level."""

    depth: int
    ancestor_id: int
    amount: Decimal
    status: HistoryStatus


@dataclass
class DistributionResult:
    """Result of one distribution walk."""

    source_user_id: int
    entries: list[CommissionEntry] = field(default_factory=list)
    failed_levels: list[int] = field(default_factory=list)

    @property
    def total_paid(self) -> Decimal:
        """Commission actually credited by this walk."""
        return sum(
            (e.amount for e in self.entries if e.status == HistoryStatus.PAID),
            Decimal("0"),
        )

    @property
    def paid_count(self) -> int:
        return sum(1 for e in self.entries if e.status == HistoryStatus.PAID)

    @property
    def pending_count(self) -> int:
        return sum(1 for e in self.entries if e.status == HistoryStatus.PENDING)


class CommissionDistributor:
    """Distribute per-level commissions up the referral chain."""

    def __init__(
        self,
        session: AsyncSession,
        threshold: Decimal | None = None,
        rank_calculator: RankCalculator | None = None,
    ) -> None:
        """
        Initialize commission distributor.

        Args:
            session: Async database session
            threshold: Activity threshold (defaults to settings)
            rank_calculator: Used to re-rank paid ancestors
        """
        self.session = session
        self.threshold = (
            threshold if threshold is not None else settings.activity_threshold
        )
        self.user_repo = UserRepository(session)
        self.history_repo = ReferralHistoryRepository(session)
        self.chain_manager = ReferralChainManager(session)
        self.rank_calculator = rank_calculator or RankCalculator(
            session, threshold=self.threshold
        )

    async def distribute(self, paid_user_id: int) -> DistributionResult:
        """
        Distribute commissions for a credited deposit.

        Never raises: failures are logged per ancestor.

        Args:
            paid_user_id: User whose deposit was credited

        Returns:
            DistributionResult
        """
        result = DistributionResult(source_user_id=paid_user_id)

        try:
            source = await self.user_repo.get_fresh(paid_user_id)
            chain = await self.chain_manager.get_referral_chain(
                paid_user_id, depth=REFERRAL_DEPTH
            )
        except Exception as e:
            await self.session.rollback()
            logger.error(
                f"Commission distribution aborted for user {paid_user_id}: {e}"
            )
            return result

        if source is None or not chain:
            return result

        # Plain values only: a rollback below expires loaded instances
        source_name = source.username
        source_email = source.email
        ancestor_ids = [ancestor.id for ancestor in chain]

        for depth, ancestor_id in enumerate(ancestor_ids, start=1):
            amount = REFERRAL_RATES[depth]

            try:
                entry = await self._settle_level(
                    ancestor_id=ancestor_id,
                    source_user_id=paid_user_id,
                    source_name=source_name,
                    source_email=source_email,
                    depth=depth,
                    amount=amount,
                )
                await self.session.commit()
            except Exception as e:
                await self.session.rollback()
                result.failed_levels.append(depth)
                logger.error(
                    f"Commission level {depth} failed for ancestor "
                    f"{ancestor_id} (source {paid_user_id}): {e}"
                )
                continue

            if entry is None:
                continue
            result.entries.append(entry)

            if entry.status == HistoryStatus.PAID:
                await self._rerank(ancestor_id)

        logger.info(
            "Commission distributed",
            extra={
                "source_user_id": paid_user_id,
                "paid": result.paid_count,
                "pending": result.pending_count,
                "failed": len(result.failed_levels),
                "total_paid": str(result.total_paid),
            },
        )
        return result

    async def _settle_level(
        self,
        ancestor_id: int,
        source_user_id: int,
        source_name: str,
        source_email: str,
        depth: int,
        amount: Decimal,
    ) -> CommissionEntry | None:
        """Lock the ancestor, then credit or record pending."""
        ancestor: User | None = await self.user_repo.get_for_update(ancestor_id)
        if ancestor is None:
            return None

        if ancestor.is_active(self.threshold):
            await self.user_repo.add_bonus(ancestor_id, amount)
            status = HistoryStatus.PAID
        else:
            status = HistoryStatus.PENDING

        await self.history_repo.append(
            user_id=ancestor_id,
            source_user_id=source_user_id,
            name=source_name,
            email=source_email,
            entry_type=HistoryEntryType.COMMISSION,
            depth=depth,
            amount=amount,
            status=status,
        )

        return CommissionEntry(
            depth=depth,
            ancestor_id=ancestor_id,
            amount=amount,
            status=status,
        )

    async def _rerank(self, user_id: int) -> None:
        try:
            await self.rank_calculator.recompute_level_and_rank(user_id)
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Rank recompute failed for user {user_id}: {e}")
