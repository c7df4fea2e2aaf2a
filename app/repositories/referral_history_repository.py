"""
Referral history repository.

Append-only log of commission and daily bonus events.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import HistoryEntryType, HistoryStatus
from app.models.referral_history import ReferralHistoryEntry
from app.repositories.base import BaseRepository


class ReferralHistoryRepository(BaseRepository[ReferralHistoryEntry]):
    """Referral history repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral history repository."""
        super().__init__(ReferralHistoryEntry, session)

    async def append(
        self,
        user_id: int,
        name: str,
        amount: Decimal,
        status: HistoryStatus,
        entry_type: HistoryEntryType = HistoryEntryType.COMMISSION,
        source_user_id: int | None = None,
        email: str | None = None,
        depth: int | None = None,
    ) -> ReferralHistoryEntry:
        """
        Append a history entry.

        Status goes through HistoryStatus.parse so only paid/pending
        ever reach the table.
        """
        return await self.create(
            user_id=user_id,
            source_user_id=source_user_id,
            name=name,
            email=email,
            entry_type=HistoryEntryType(entry_type).value,
            depth=depth,
            amount=amount,
            status=HistoryStatus.parse(status).value,
        )

    async def sum_paid_commission(self) -> Decimal:
        """Total commission actually credited, platform-wide."""
        stmt = select(
            func.coalesce(func.sum(ReferralHistoryEntry.amount), 0)
        ).where(
            ReferralHistoryEntry.entry_type == HistoryEntryType.COMMISSION.value,
            ReferralHistoryEntry.status == HistoryStatus.PAID.value,
        )
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))
