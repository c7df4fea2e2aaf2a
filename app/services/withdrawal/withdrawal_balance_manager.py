"""
Withdrawal balance manager.

Computes the withdrawable amount and applies a completed payout to the
user's earnings.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.withdrawal_repository import WithdrawalRepository


class WithdrawalBalanceManager:
    """Manages balance operations for withdrawal requests."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize withdrawal balance manager.

        Args:
            session: Database session
        """
        self.session = session
        self.withdrawal_repo = WithdrawalRepository(session)

    async def get_available(
        self, user: User, exclude_withdrawal_id: int | None = None
    ) -> Decimal:
        """
        Withdrawable amount: max(daily_profit + bonus_earned - on_hold, 0).

        Args:
            user: User (ideally locked by the caller)
            exclude_withdrawal_id: Withdrawal whose own hold is ignored
                (the one being approved)

        Returns:
            Available amount
        """
        on_hold = await self.withdrawal_repo.sum_on_hold(
            user.id, exclude_id=exclude_withdrawal_id
        )
        return max(user.earnings - on_hold, Decimal("0"))

    def apply_payout(self, user: User, amount: Decimal) -> tuple[Decimal, Decimal]:
        """
        Deduct a paid withdrawal: bonus_earned first, then daily_profit.

        daily_profit is floored at zero. withdrawn_total grows by the full
        amount.

        Args:
            user: Locked user row
            amount: Paid amount

        Returns:
            Tuple of (taken_from_bonus, taken_from_daily_profit)
        """
        bonus = user.bonus_earned or Decimal("0")
        daily = user.daily_profit or Decimal("0")

        from_bonus = min(bonus, amount)
        remaining = amount - from_bonus
        from_daily = min(daily, remaining)

        user.bonus_earned = bonus - from_bonus
        user.daily_profit = max(daily - remaining, Decimal("0"))
        user.withdrawn_total = (user.withdrawn_total or Decimal("0")) + amount

        logger.info(
            "Payout applied to earnings",
            extra={
                "user_id": user.id,
                "amount": str(amount),
                "from_bonus": str(from_bonus),
                "from_daily": str(from_daily),
            },
        )
        return from_bonus, from_daily
