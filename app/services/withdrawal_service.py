"""
Withdrawal service - Main service facade.

This service acts as a facade that delegates to specialized modules
for better code organization and maintainability.

Module structure:
- withdrawal/withdrawal_request_handler: Request creation and validation
- withdrawal/withdrawal_lifecycle_handler: Approval (with payout) and rejection
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import Settings
from app.models.withdrawal import Withdrawal
from app.services.base_service import BaseService, log_operation
from app.services.withdrawal.withdrawal_lifecycle_handler import (
    PayoutClient,
    WithdrawalLifecycleHandler,
)
from app.services.withdrawal.withdrawal_request_handler import (
    WithdrawalRequestHandler,
)


class WithdrawalService(BaseService):
    """
    Withdrawal service for managing withdrawal requests.

    This is a facade that delegates to specialized modules. The payout
    client is only needed for approval.
    """

    def __init__(
        self,
        session: AsyncSession,
        payout_client: PayoutClient | None = None,
        app_settings: Settings | None = None,
    ) -> None:
        """Initialize withdrawal service and all sub-components."""
        super().__init__(session)

        self.request_handler = WithdrawalRequestHandler(session, app_settings)
        self.lifecycle_handler = WithdrawalLifecycleHandler(session, payout_client)

    # ========================================================================
    # REQUEST HANDLING (delegates to WithdrawalRequestHandler)
    # ========================================================================

    async def get_available(self, user_id: int) -> Decimal:
        """
        Withdrawable amount: earnings minus pending/approved holds.

        Args:
            user_id: User ID

        Returns:
            Available amount (never negative)
        """
        return await self.request_handler.get_available(user_id)

    async def request_withdrawal(
        self,
        user_id: int,
        address: str | None,
        amount: Decimal | str | int | float | None,
    ) -> Withdrawal:
        """
        Create a pending withdrawal.

        Args:
            user_id: User ID
            address: BEP20 destination
            amount: Requested amount

        Returns:
            Pending withdrawal
        """
        return await self.request_handler.request_withdrawal(
            user_id, address, amount
        )

    # ========================================================================
    # LIFECYCLE (delegates to WithdrawalLifecycleHandler)
    # ========================================================================

    @log_operation
    async def approve_withdrawal(
        self, withdrawal_id: int, admin_id: int | None = None
    ) -> Withdrawal:
        """
        Approve and pay out a pending withdrawal.

        Returns:
            Withdrawal in its final state (paid or failed)
        """
        return await self.lifecycle_handler.approve_withdrawal(withdrawal_id, admin_id)

    @log_operation
    async def reject_withdrawal(
        self,
        withdrawal_id: int,
        reason: str | None = None,
        admin_id: int | None = None,
    ) -> Withdrawal:
        """Reject a pending withdrawal; nothing is deducted."""
        return await self.lifecycle_handler.reject_withdrawal(
            withdrawal_id, reason, admin_id
        )
