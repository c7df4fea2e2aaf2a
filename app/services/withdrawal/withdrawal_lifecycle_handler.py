"""
Withdrawal lifecycle handling module.

Handles admin approval (balance re-check, exchange payout, settlement)
and rejection. Both are valid only from pending.
"""

from decimal import Decimal
from typing import Protocol

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import WithdrawalStatus
from app.models.withdrawal import Withdrawal
from app.repositories.user_repository import UserRepository
from app.repositories.withdrawal_repository import WithdrawalRepository
from app.services.payout.binance_client import PayoutError
from app.services.withdrawal.withdrawal_balance_manager import (
    WithdrawalBalanceManager,
)
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import (
    InsufficientFundsError,
    InvalidStateError,
    NotFoundError,
    PlatformError,
)
from app.utils.security import mask_address


class PayoutClient(Protocol):
    """What approval needs from the exchange client."""

    async def withdraw(
        self,
        coin: str,
        address: str,
        amount: Decimal,
        chain: str | None = None,
        order_id: str | None = None,
    ) -> str: ...


class WithdrawalLifecycleHandler:
    """Handles withdrawal lifecycle operations."""

    def __init__(
        self, session: AsyncSession, payout_client: PayoutClient | None = None
    ) -> None:
        """
        Initialize withdrawal lifecycle handler.

        Args:
            session: Database session
            payout_client: Exchange payout client (required for approval)
        """
        self.session = session
        self.payout_client = payout_client
        self.user_repo = UserRepository(session)
        self.withdrawal_repo = WithdrawalRepository(session)
        self.balance_manager = WithdrawalBalanceManager(session)

    async def approve_withdrawal(
        self, withdrawal_id: int, admin_id: int | None = None
    ) -> Withdrawal:
        """
        Approve a pending withdrawal and pay it out.

        1. Lock withdrawal + user, re-check available (excluding this
           withdrawal's own hold), move pending -> approved, commit.
        2. Call the exchange.
        3. Success: approved -> paid, record payout id, deduct earnings.
           Failure: approved -> failed with the exchange message, no
           ledger change.

        Args:
            withdrawal_id: Withdrawal ID
            admin_id: Approving admin

        Returns:
            Withdrawal in its final state (paid or failed)

        Raises:
            NotFoundError: Unknown withdrawal
            InvalidStateError: Not pending
            InsufficientFundsError: Earnings dropped below the amount
        """
        if self.payout_client is None:
            raise RuntimeError("Payout client is not configured")

        withdrawal = await self._reserve_for_payout(withdrawal_id, admin_id)

        try:
            payout_id = await self.payout_client.withdraw(
                coin=withdrawal.currency,
                address=withdrawal.address,
                amount=withdrawal.amount,
                chain=withdrawal.chain,
                order_id=f"WD{withdrawal.id}",
            )
        except PayoutError as e:
            return await self._mark_failed(withdrawal_id, e.message)
        except Exception as e:
            logger.exception(f"Unexpected payout error for withdrawal {withdrawal_id}")
            return await self._mark_failed(withdrawal_id, f"Payout failed: {e}")

        return await self._settle_paid(withdrawal_id, payout_id)

    async def reject_withdrawal(
        self,
        withdrawal_id: int,
        reason: str | None = None,
        admin_id: int | None = None,
    ) -> Withdrawal:
        """
        Reject a pending withdrawal. No ledger effect.

        Raises:
            NotFoundError: Unknown withdrawal
            InvalidStateError: Not pending
        """
        try:
            withdrawal = await self._lock_pending(withdrawal_id)
            withdrawal.status = WithdrawalStatus.REJECTED.value
            withdrawal.note = (reason or "").strip() or "Rejected by admin"
            withdrawal.approved_by = admin_id
            withdrawal.approved_at = utc_now()
            await self.session.commit()
        except PlatformError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to reject withdrawal",
                extra={"withdrawal_id": withdrawal_id, "error": str(e)},
            )
            raise

        logger.info(
            "Withdrawal rejected",
            extra={
                "withdrawal_id": withdrawal_id,
                "admin_id": admin_id,
                "reason": withdrawal.note,
            },
        )
        return withdrawal

    async def _lock_pending(self, withdrawal_id: int) -> Withdrawal:
        withdrawal = await self.withdrawal_repo.get_for_update(withdrawal_id)
        if withdrawal is None:
            raise NotFoundError("Withdrawal not found")
        if withdrawal.status != WithdrawalStatus.PENDING.value:
            raise InvalidStateError(
                f"Withdrawal is {withdrawal.status}, not pending"
            )
        return withdrawal

    async def _reserve_for_payout(
        self, withdrawal_id: int, admin_id: int | None
    ) -> Withdrawal:
        try:
            withdrawal = await self._lock_pending(withdrawal_id)

            user = await self.user_repo.get_for_update(withdrawal.user_id)
            if user is None:
                raise NotFoundError("User not found")

            available = await self.balance_manager.get_available(
                user, exclude_withdrawal_id=withdrawal.id
            )
            if withdrawal.amount > available:
                raise InsufficientFundsError(
                    "User no longer has withdrawable balance"
                )

            withdrawal.status = WithdrawalStatus.APPROVED.value
            withdrawal.approved_by = admin_id
            withdrawal.approved_at = utc_now()
            await self.session.commit()
        except PlatformError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to approve withdrawal",
                extra={"withdrawal_id": withdrawal_id, "error": str(e)},
            )
            raise

        logger.info(
            f"Withdrawal {withdrawal_id} approved, paying {withdrawal.amount} "
            f"to {mask_address(withdrawal.address)}"
        )
        return withdrawal

    async def _settle_paid(self, withdrawal_id: int, payout_id: str) -> Withdrawal:
        try:
            withdrawal = await self.withdrawal_repo.get_for_update(withdrawal_id)
            user = await self.user_repo.get_for_update(withdrawal.user_id)

            withdrawal.status = WithdrawalStatus.PAID.value
            withdrawal.tx_id = payout_id
            if user is not None:
                self.balance_manager.apply_payout(user, withdrawal.amount)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            # Money has left the exchange; an operator must reconcile
            logger.critical(
                f"Withdrawal {withdrawal_id} paid out (id {payout_id}) "
                f"but settlement failed: {e}"
            )
            raise

        logger.success(
            f"Withdrawal {withdrawal_id} paid, payout id {payout_id}"
        )
        return withdrawal

    async def _mark_failed(self, withdrawal_id: int, note: str) -> Withdrawal:
        withdrawal = await self.withdrawal_repo.get_for_update(withdrawal_id)
        withdrawal.status = WithdrawalStatus.FAILED.value
        withdrawal.note = note or "Binance payout failed"
        await self.session.commit()

        logger.error(f"Withdrawal {withdrawal_id} payout failed: {withdrawal.note}")
        return withdrawal
