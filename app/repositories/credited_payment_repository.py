"""
Credited payment repository.

Data access layer for the persisted set of credited transaction ids.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.credited_payment import CreditedPayment
from app.repositories.base import BaseRepository


class CreditedPaymentRepository(BaseRepository[CreditedPayment]):
    """Credited payment repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize credited payment repository."""
        super().__init__(CreditedPayment, session)

    async def get_by_tx_id(self, tx_id: str) -> CreditedPayment | None:
        """
        Get credited payment by transaction id.

        Transaction ids are stored lowercase.
        """
        return await self.get_by(tx_id=tx_id.lower())

