"""
Deposit ledger.

Credits a confirmed on-chain transfer to a user's balance exactly once.
The UNIQUE constraint on credited_payments.tx_id is the authoritative
guard; the pre-check only short-circuits the common repeat case.
"""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from enum import StrEnum

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import MONEY_QUANT
from app.config.settings import settings
from app.models.credited_payment import CreditedPayment
from app.repositories.credited_payment_repository import (
    CreditedPaymentRepository,
)
from app.repositories.user_repository import UserRepository
from app.services.blockchain.transfer_scanner import TransferMatch
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import DuplicateTransactionError, NotFoundError
from app.utils.security import mask_tx_hash
from app.utils.validation import normalize_address, normalize_tx_hash


class CreditStatus(StrEnum):
    """Ledger outcome for a matched transfer."""

    CREDITED = "credited"
    ALREADY_CREDITED = "already_credited"


@dataclass
class CreditResult:
    """Result of crediting one transfer."""

    status: CreditStatus
    user_id: int
    balance: Decimal
    tx_hash: str
    from_address: str
    amount: Decimal  # Amount added to the balance (0 when already credited)
    eligibility_started: bool = False


class DepositLedger:
    """Atomic balance credit + tx id record."""

    def __init__(
        self,
        session: AsyncSession,
        threshold: Decimal | None = None,
        daily_profit_unit: Decimal | None = None,
        chain: str = "BSC",
    ) -> None:
        """
        Initialize deposit ledger.

        Args:
            session: Async database session
            threshold: Activity threshold for daily-profit eligibility
            daily_profit_unit: Units granted on first eligibility
            chain: Chain tag stored with each payment
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.payment_repo = CreditedPaymentRepository(session)
        self.threshold = (
            threshold if threshold is not None else settings.activity_threshold
        )
        self.daily_profit_unit = (
            daily_profit_unit
            if daily_profit_unit is not None
            else settings.daily_profit_unit
        )
        self.chain = chain

    async def credit(self, user_id: int, match: TransferMatch) -> CreditResult:
        """
        Credit a matched transfer to a user, at most once per tx id.

        Args:
            user_id: Receiving user
            match: Transfer proven on chain

        Returns:
            CreditResult (CREDITED or ALREADY_CREDITED)

        Raises:
            DuplicateTransactionError: tx id belongs to another user
            NotFoundError: Unknown user
        """
        tx_id = normalize_tx_hash(match.tx_hash)

        existing = await self.payment_repo.get_by_tx_id(tx_id)
        if existing is not None:
            return await self._already_credited(existing, user_id, match)

        try:
            result = await self._credit_new(user_id, tx_id, match)
            await self.session.commit()
        except IntegrityError:
            # A concurrent request recorded the same tx id first
            await self.session.rollback()
            existing = await self.payment_repo.get_by_tx_id(tx_id)
            if existing is None:
                raise
            return await self._already_credited(existing, user_id, match)
        except Exception:
            await self.session.rollback()
            raise

        logger.success(
            f"Deposit credited: user {user_id} +{result.amount} "
            f"(tx {mask_tx_hash(tx_id)}), balance {result.balance}"
        )
        return result

    async def _credit_new(
        self, user_id: int, tx_id: str, match: TransferMatch
    ) -> CreditResult:
        user = await self.user_repo.get_for_update(user_id)
        if user is None:
            raise NotFoundError("User not found")

        amount = match.amount.quantize(MONEY_QUANT, rounding=ROUND_DOWN)
        user.balance = (user.balance or Decimal("0")) + amount

        self.session.add(
            CreditedPayment(
                user_id=user_id,
                tx_id=tx_id,
                amount=match.amount,
                from_address=normalize_address(match.from_address),
                chain=self.chain,
            )
        )

        eligibility_started = False
        if not user.daily_profit_eligible and user.is_active(self.threshold):
            now = utc_now()
            user.daily_profit_eligible = True
            user.eligible_since = now
            user.last_daily_bonus_at = now
            user.daily_profit = (
                (user.daily_profit or Decimal("0")) + self.daily_profit_unit
            )
            eligibility_started = True

        await self.session.flush()

        return CreditResult(
            status=CreditStatus.CREDITED,
            user_id=user_id,
            balance=user.balance,
            tx_hash=tx_id,
            from_address=match.from_address,
            amount=amount,
            eligibility_started=eligibility_started,
        )

    async def _already_credited(
        self, existing: CreditedPayment, user_id: int, match: TransferMatch
    ) -> CreditResult:
        if existing.user_id != user_id:
            logger.warning(
                f"Transaction {mask_tx_hash(existing.tx_id)} already credited "
                f"to user {existing.user_id}, claimed by user {user_id}"
            )
            raise DuplicateTransactionError(
                "This transaction has already been credited to another account"
            )

        user = await self.user_repo.get_fresh(user_id)
        if user is None:
            raise NotFoundError("User not found")

        logger.info(
            f"Transaction {mask_tx_hash(existing.tx_id)} already credited "
            f"to user {user_id}, nothing to do"
        )
        return CreditResult(
            status=CreditStatus.ALREADY_CREDITED,
            user_id=user_id,
            balance=user.balance,
            tx_hash=existing.tx_id,
            from_address=match.from_address,
            amount=Decimal("0"),
        )
