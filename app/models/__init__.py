"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.base import Base
from app.models.credited_payment import CreditedPayment
from app.models.enums import (
    HistoryEntryType,
    HistoryStatus,
    WithdrawalStatus,
)
from app.models.referral_history import ReferralHistoryEntry
from app.models.user import User
from app.models.withdrawal import Withdrawal


__all__ = [
    "Base",
    "CreditedPayment",
    "HistoryEntryType",
    "HistoryStatus",
    "ReferralHistoryEntry",
    "User",
    "Withdrawal",
    "WithdrawalStatus",
]
