"""
Withdrawal services package.

This package provides modular withdrawal management functionality:
- withdrawal_validator: Amount and address checks
- withdrawal_balance_manager: Available amount and payout deduction
- withdrawal_request_handler: Withdrawal request creation
- withdrawal_lifecycle_handler: Approval (with payout) and rejection
"""

from app.services.withdrawal.withdrawal_balance_manager import (
    WithdrawalBalanceManager,
)
from app.services.withdrawal.withdrawal_lifecycle_handler import (
    PayoutClient,
    WithdrawalLifecycleHandler,
)
from app.services.withdrawal.withdrawal_request_handler import (
    WithdrawalRequestHandler,
)
from app.services.withdrawal.withdrawal_validator import (
    ValidationResult,
    WithdrawalValidator,
)


__all__ = [
    "PayoutClient",
    "ValidationResult",
    "WithdrawalBalanceManager",
    "WithdrawalLifecycleHandler",
    "WithdrawalRequestHandler",
    "WithdrawalValidator",
]
