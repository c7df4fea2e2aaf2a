"""
Withdrawal request handling module.

Creates pending withdrawal requests after validating them against the
user's withdrawable earnings.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import Settings, settings as default_settings
from app.models.enums import WithdrawalStatus
from app.models.withdrawal import Withdrawal
from app.repositories.user_repository import UserRepository
from app.repositories.withdrawal_repository import WithdrawalRepository
from app.services.withdrawal.withdrawal_balance_manager import (
    WithdrawalBalanceManager,
)
from app.services.withdrawal.withdrawal_validator import WithdrawalValidator
from app.utils.exceptions import (
    InsufficientFundsError,
    NotFoundError,
    PlatformError,
    ValidationError,
)
from app.utils.security import mask_address


class WithdrawalRequestHandler:
    """Handles withdrawal request creation and validation."""

    def __init__(
        self, session: AsyncSession, app_settings: Settings | None = None
    ) -> None:
        """
        Initialize withdrawal request handler.

        Args:
            session: Database session
            app_settings: Settings override (tests)
        """
        self.session = session
        self.settings = app_settings or default_settings
        self.user_repo = UserRepository(session)
        self.withdrawal_repo = WithdrawalRepository(session)
        self.balance_manager = WithdrawalBalanceManager(session)
        self.validator = WithdrawalValidator(self.settings)

    async def get_available(self, user_id: int) -> Decimal:
        """
        Withdrawable amount for a user.

        Raises:
            NotFoundError: Unknown user
        """
        user = await self.user_repo.get_fresh(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return await self.balance_manager.get_available(user)

    async def request_withdrawal(
        self,
        user_id: int,
        address: str | None,
        amount: Decimal | str | int | float | None,
    ) -> Withdrawal:
        """
        Create a pending withdrawal.

        The user row is locked while the on-hold sum is read, so two
        concurrent requests cannot both spend the same earnings.

        Args:
            user_id: Requesting user
            address: Destination address
            amount: Requested amount

        Returns:
            Created withdrawal

        Raises:
            ValidationError: Bad amount/address
            InsufficientFundsError: Amount above available
            NotFoundError: Unknown user
        """
        validation = self.validator.validate_request(address, amount)
        if not validation.is_valid:
            raise ValidationError(validation.error_message or "Invalid request")

        try:
            user = await self.user_repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User not found")

            available = await self.balance_manager.get_available(user)
            if validation.amount > available:
                raise InsufficientFundsError("Insufficient withdrawable balance")

            withdrawal = await self.withdrawal_repo.create(
                user_id=user_id,
                amount=validation.amount,
                fee=Decimal("0"),
                net_amount=validation.amount,
                currency=self.settings.withdraw_currency,
                chain=self.settings.withdraw_chain,
                address=validation.address,
                status=WithdrawalStatus.PENDING.value,
            )
            await self.session.commit()

        except PlatformError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to create withdrawal request",
                extra={"user_id": user_id, "error": str(e)},
            )
            raise

        logger.info(
            f"Withdrawal {withdrawal.id} requested by user {user_id}: "
            f"{withdrawal.amount} to {mask_address(withdrawal.address)}"
        )
        return withdrawal
