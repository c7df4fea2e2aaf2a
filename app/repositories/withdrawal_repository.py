"""
Withdrawal repository.

Data access layer for Withdrawal model.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import WITHDRAWAL_ON_HOLD_STATUSES
from app.models.withdrawal import Withdrawal
from app.repositories.base import BaseRepository


class WithdrawalRepository(BaseRepository[Withdrawal]):
    """Withdrawal repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal repository."""
        super().__init__(Withdrawal, session)

    async def sum_on_hold(
        self, user_id: int, exclude_id: int | None = None
    ) -> Decimal:
        """
        Sum of a user's withdrawals that are pending or approved.

        Args:
            user_id: Owner
            exclude_id: Withdrawal to leave out (the one being settled)

        Returns:
            On-hold amount
        """
        stmt = select(func.coalesce(func.sum(Withdrawal.amount), 0)).where(
            Withdrawal.user_id == user_id,
            Withdrawal.status.in_(
                [status.value for status in WITHDRAWAL_ON_HOLD_STATUSES]
            ),
        )
        if exclude_id is not None:
            stmt = stmt.where(Withdrawal.id != exclude_id)

        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))

    async def sum_all_amounts(self) -> Decimal:
        """Sum of all withdrawal amounts regardless of status."""
        stmt = select(func.coalesce(func.sum(Withdrawal.amount), 0))
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))
