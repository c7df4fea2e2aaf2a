"""
Deposit services module.

- ledger: Idempotent balance credit for a confirmed transfer
- confirmation_service: Scan, credit and commission for one deposit claim
"""

from .confirmation_service import (
    ConfirmationStatus,
    DepositConfirmation,
    DepositConfirmationService,
)
from .ledger import CreditResult, CreditStatus, DepositLedger


__all__ = [
    "ConfirmationStatus",
    "CreditResult",
    "CreditStatus",
    "DepositConfirmation",
    "DepositConfirmationService",
    "DepositLedger",
]
