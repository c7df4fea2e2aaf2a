"""
Referral history model.

Append-only audit trail of commission events (paid or foregone) and daily
bonus credits for a user.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import HistoryEntryType
from app.models.types import MoneyType


class ReferralHistoryEntry(Base):
    """
    One referral history event.

    Attributes:
        user_id: Owner of the entry (the ancestor, or the claimant for
            daily bonuses)
        source_user_id: User whose deposit produced the commission
        name: Display name of the source ("Daily Bonus" for claims)
        entry_type: commission / daily_bonus
        depth: Distance from source to owner (1 = direct parent)
        amount: Credit units paid or foregone
        status: paid / pending
    """

    __tablename__ = "referral_history"
    __table_args__ = (
        CheckConstraint(
            "status IN ('paid', 'pending')",
            name="check_referral_history_status"
        ),
        CheckConstraint(
            "entry_type IN ('commission', 'daily_bonus')",
            name="check_referral_history_entry_type"
        ),
        CheckConstraint(
            "amount >= 0", name="check_referral_history_amount_non_negative"
        ),
        Index("idx_referral_history_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    entry_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=HistoryEntryType.COMMISSION.value
    )
    depth: Mapped[int | None] = mapped_column(Integer, nullable=True)

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralHistoryEntry(user_id={self.user_id}, "
            f"name={self.name!r}, amount={self.amount}, status={self.status})>"
        )
