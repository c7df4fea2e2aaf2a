"""
Deposit confirmation service.

Confirms a client-claimed deposit by scanning the chain for a qualifying
transfer to the admin wallet, credits it through the ledger, then runs
commission distribution and re-ranks the depositor.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.constants import LOCK_TTL_MARGIN_SECONDS
from app.config.settings import Settings, settings as default_settings
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService
from app.services.blockchain.transfer_scanner import (
    ChunkedTransferScanner,
    scan_with_timeout,
)
from app.services.deposit.ledger import CreditStatus, DepositLedger
from app.services.referral.commission_distributor import (
    CommissionDistributor,
    DistributionResult,
)
from app.services.referral.rank_calculator import RankCalculator
from app.utils.distributed_lock import DistributedLock, get_distributed_lock
from app.utils.exceptions import (
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.utils.security import mask_tx_hash
from app.validators.unified import validate_amount


class ConfirmationStatus(StrEnum):
    """Externally visible outcome of a confirmation request."""

    CREDITED = "credited"
    ALREADY_CREDITED = "already_credited"
    NOT_FOUND_YET = "not_found_yet"


@dataclass
class DepositConfirmation:
    """Result of confirm_deposit."""

    status: ConfirmationStatus
    balance: Decimal
    tx_hash: str | None = None
    from_address: str | None = None
    amount: Decimal | None = None
    commission: DistributionResult | None = None

    @property
    def found(self) -> bool:
        return self.status != ConfirmationStatus.NOT_FOUND_YET


class DepositConfirmationService(BaseService):
    """Orchestrates scan -> credit -> commission for one deposit claim."""

    def __init__(
        self,
        session: AsyncSession,
        scanner: ChunkedTransferScanner,
        lock: DistributedLock | None = None,
        app_settings: Settings | None = None,
    ) -> None:
        """
        Initialize deposit confirmation service.

        Args:
            session: Async database session
            scanner: Chunked transfer scanner
            lock: Lock used to serialize confirmations per user
            app_settings: Settings override (tests)
        """
        super().__init__(session)
        self.settings = app_settings or default_settings
        self.scanner = scanner
        self.lock = lock or get_distributed_lock()
        self.user_repo = UserRepository(session)
        self.ledger = DepositLedger(
            session,
            threshold=self.settings.activity_threshold,
            daily_profit_unit=self.settings.daily_profit_unit,
        )
        self.rank_calculator = RankCalculator(
            session, threshold=self.settings.activity_threshold
        )
        self.distributor = CommissionDistributor(
            session,
            threshold=self.settings.activity_threshold,
            rank_calculator=self.rank_calculator,
        )

    @property
    def lock_ttl(self) -> int:
        """Confirmation lock TTL: the whole scan plus a margin."""
        return math.ceil(self.settings.scan_timeout_seconds) + LOCK_TTL_MARGIN_SECONDS

    async def confirm_deposit(
        self, user_id: int, claimed_amount: Decimal | str | int | float
    ) -> DepositConfirmation:
        """
        Confirm a deposit the user says they sent.

        The claimed amount is a lower bound for the search; the balance is
        credited with the amount actually found on chain.

        Args:
            user_id: Authenticated user
            claimed_amount: Amount the user says they sent

        Returns:
            DepositConfirmation

        Raises:
            ValidationError: Bad or too small amount
            NotFoundError: Unknown user
            InvalidStateError: Another confirmation for this user is running
            DuplicateTransactionError: Matched transfer belongs to another user
        """
        amount = self._validate_claim(claimed_amount)

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        async with self.lock.lock(
            f"deposit_confirm:{user_id}", timeout=self.lock_ttl
        ) as acquired:
            if not acquired:
                raise InvalidStateError(
                    "A deposit confirmation is already in progress"
                )

            match = await scan_with_timeout(
                self.scanner,
                recipient=self.settings.admin_wallet_address,
                min_amount=amount,
                lookback_blocks=self.settings.deposit_lookback_blocks,
                timeout=self.settings.scan_timeout_seconds,
            )

            if match is None:
                fresh = await self.user_repo.get_fresh(user_id)
                self.logger.warning(
                    f"Deposit of {amount} for user {user_id} not found yet"
                )
                return DepositConfirmation(
                    status=ConfirmationStatus.NOT_FOUND_YET,
                    balance=fresh.balance if fresh else Decimal("0"),
                )

            credit = await self.ledger.credit(user_id, match)

        if credit.status == CreditStatus.ALREADY_CREDITED:
            return DepositConfirmation(
                status=ConfirmationStatus.ALREADY_CREDITED,
                balance=credit.balance,
                tx_hash=credit.tx_hash,
                from_address=credit.from_address,
                amount=match.amount,
            )

        commission = await self.distributor.distribute(user_id)
        await self._rerank_depositor(user_id)

        self.logger.info(
            f"Deposit confirmed for user {user_id}: {match.amount} "
            f"(tx {mask_tx_hash(credit.tx_hash)})"
        )
        return DepositConfirmation(
            status=ConfirmationStatus.CREDITED,
            balance=credit.balance,
            tx_hash=credit.tx_hash,
            from_address=credit.from_address,
            amount=match.amount,
            commission=commission,
        )

    def _validate_claim(self, claimed_amount: Decimal | str | int | float) -> Decimal:
        is_valid, amount, error = validate_amount(claimed_amount)
        if not is_valid:
            raise ValidationError(error or "Invalid amount")

        minimum = self.settings.minimum_deposit_amount
        if amount < minimum:
            raise ValidationError(f"Minimum deposit is {minimum}")
        return amount

    async def _rerank_depositor(self, user_id: int) -> None:
        try:
            await self.rank_calculator.recompute_level_and_rank(user_id)
        except Exception as e:
            await self.session.rollback()
            self.logger.error(f"Rank recompute failed for depositor {user_id}: {e}")
