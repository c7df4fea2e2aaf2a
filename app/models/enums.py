"""
Model enumerations.

Closed sets of values stored in string columns.
"""

from enum import StrEnum


class HistoryStatus(StrEnum):
    """Outcome of a referral history entry."""

    PAID = "paid"  # Credited to bonus_earned / daily_profit
    PENDING = "pending"  # Foregone: ancestor was below the activity threshold

    @classmethod
    def parse(cls, value: str) -> "HistoryStatus":
        """
        Parse a raw status, rejecting anything outside the closed set.

        Raises:
            ValueError: If value is not a known status
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown history status: {value!r}") from exc


class HistoryEntryType(StrEnum):
    """What produced a history entry."""

    COMMISSION = "commission"
    DAILY_BONUS = "daily_bonus"


class WithdrawalStatus(StrEnum):
    """Withdrawal lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"  # Balance re-checked, payout in flight
    REJECTED = "rejected"
    PAID = "paid"
    FAILED = "failed"


WITHDRAWAL_ON_HOLD_STATUSES = frozenset({
    WithdrawalStatus.PENDING,
    WithdrawalStatus.APPROVED,
})
