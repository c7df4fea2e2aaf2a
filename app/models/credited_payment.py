"""
Credited payment model.

One row per on-chain transaction credited to a user's ledger. The UNIQUE
constraint on tx_id makes crediting at-most-once across all users.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import BigMoneyType


class CreditedPayment(Base):
    """Transaction id already credited to a user's balance."""

    __tablename__ = "credited_payments"
    __table_args__ = (
        UniqueConstraint("tx_id", name="uq_credited_payments_tx_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    tx_id: Mapped[str] = mapped_column(String(66), nullable=False)

    # Exact on-chain value (token decimals applied)
    amount: Mapped[Decimal] = mapped_column(BigMoneyType, nullable=False)
    from_address: Mapped[str | None] = mapped_column(
        String(42), nullable=True
    )
    chain: Mapped[str] = mapped_column(
        String(20), nullable=False, default="BSC"
    )

    credited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CreditedPayment(tx_id={self.tx_id[:16]}..., "
            f"user_id={self.user_id}, amount={self.amount})>"
        )
