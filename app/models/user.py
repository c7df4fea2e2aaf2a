"""
User model.

Represents a registered platform user and their internal ledger.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.config.business_constants import DEFAULT_RANK
from app.models.base import Base
from app.models.types import MoneyType


class User(Base):
    """User model - ledger balances and referral position."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'balance >= 0', name='check_user_balance_non_negative'
        ),
        CheckConstraint(
            'bonus_earned >= 0',
            name='check_user_bonus_earned_non_negative'
        ),
        CheckConstraint(
            'daily_profit >= 0',
            name='check_user_daily_profit_non_negative'
        ),
        CheckConstraint(
            'level >= 0 AND level <= 10', name='check_user_level_range'
        ),
        CheckConstraint(
            'parent_id IS NULL OR parent_id <> id',
            name='check_user_not_own_parent'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    username: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )

    # Referral
    referral_code: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    referrals_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    # Balances (credit units)
    balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    bonus_earned: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    daily_profit: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    withdrawn_total: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Rank
    level: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    rank: Mapped[str] = mapped_column(
        String(32), default=DEFAULT_RANK, nullable=False
    )

    # Daily profit
    daily_profit_eligible: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    eligible_since: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_daily_bonus_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, email={self.email!r}, "
            f"balance={self.balance}, level={self.level})>"
        )

    @property
    def earnings(self) -> Decimal:
        """Withdrawable earnings before holds: daily profit + commissions."""
        return (self.daily_profit or Decimal("0")) + (
            self.bonus_earned or Decimal("0")
        )

    def is_active(self, threshold: Decimal) -> bool:
        """Active users hold at least the threshold balance."""
        return (self.balance or Decimal("0")) >= threshold
