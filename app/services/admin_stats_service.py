"""
Admin statistics service.

Platform-wide aggregates for the admin dashboard.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.referral_history_repository import (
    ReferralHistoryRepository,
)
from app.repositories.user_repository import UserRepository
from app.repositories.withdrawal_repository import WithdrawalRepository
from app.services.base_service import BaseService, log_operation


@dataclass
class AdminStats:
    """Dashboard totals."""

    total_users: int
    sum_daily_profit: Decimal
    sum_bonus_earned: Decimal
    total_commission: Decimal
    total_withdraw: Decimal

    @property
    def total_earnings(self) -> Decimal:
        return self.sum_daily_profit + self.total_commission

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalUsers": self.total_users,
            "sumDailyProfit": self.sum_daily_profit,
            "sumBonusEarned": self.sum_bonus_earned,
            "totalCommission": self.total_commission,
            "totalWithdraw": self.total_withdraw,
            "totalEarnings": self.total_earnings,
        }


class AdminStatsService(BaseService):
    """Read-only aggregates over users, history and withdrawals."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize admin stats service."""
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.history_repo = ReferralHistoryRepository(session)
        self.withdrawal_repo = WithdrawalRepository(session)

    @log_operation
    async def get_admin_stats(self) -> AdminStats:
        """
        Collect dashboard totals.

        Commission counts paid entries only; withdrawals count every
        status.
        """
        totals = await self.user_repo.get_totals()
        total_commission = await self.history_repo.sum_paid_commission()
        total_withdraw = await self.withdrawal_repo.sum_all_amounts()

        return AdminStats(
            total_users=totals["total_users"],
            sum_daily_profit=totals["sum_daily_profit"],
            sum_bonus_earned=totals["sum_bonus_earned"],
            total_commission=total_commission,
            total_withdraw=total_withdraw,
        )
