"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from app.services.admin_stats_service import AdminStats, AdminStatsService
from app.services.base_service import (
    BaseService,
    log_operation,
)

# Core Services
from app.services.deposit import (
    ConfirmationStatus,
    DepositConfirmation,
    DepositConfirmationService,
)
from app.services.payout import BinancePayoutClient, PayoutError
from app.services.referral import CommissionDistributor, RankCalculator
from app.services.user import UserService
from app.services.withdrawal_service import WithdrawalService


__all__ = [
    "AdminStats",
    "AdminStatsService",
    "BaseService",
    "BinancePayoutClient",
    "CommissionDistributor",
    "ConfirmationStatus",
    "DepositConfirmation",
    "DepositConfirmationService",
    "PayoutError",
    "RankCalculator",
    "UserService",
    "WithdrawalService",
    "log_operation",
]
