"""
Daily profit claims.

An eligible, active user may claim one daily profit unit per interval.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import DAILY_BONUS_ENTRY_NAME
from app.config.settings import Settings, settings as default_settings
from app.models.enums import HistoryEntryType, HistoryStatus
from app.repositories.referral_history_repository import (
    ReferralHistoryRepository,
)
from app.repositories.user_repository import UserRepository
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.exceptions import (
    CooldownError,
    NotFoundError,
    PlatformError,
    ValidationError,
)


@dataclass
class DailyProfitResult:
    """Successful claim."""

    amount: Decimal
    daily_profit: Decimal
    last_daily_bonus_at: datetime


class DailyProfitMixin:
    """Mixin for daily profit claims."""

    def __init__(
        self, session: AsyncSession, app_settings: Settings | None = None
    ) -> None:
        """Initialize daily profit mixin."""
        self.session = session
        self.settings = app_settings or default_settings
        self.user_repo = UserRepository(session)
        self.history_repo = ReferralHistoryRepository(session)

    async def claim_daily_profit(
        self, user_id: int, now: datetime | None = None
    ) -> DailyProfitResult:
        """
        Credit one daily profit unit if the interval has elapsed.

        Args:
            user_id: Claiming user
            now: Current time (tests)

        Returns:
            DailyProfitResult

        Raises:
            NotFoundError: Unknown user
            ValidationError: Not eligible
            CooldownError: Too early; carries the remaining whole hours
        """
        now = now or utc_now()
        interval = timedelta(hours=self.settings.daily_profit_interval_hours)
        unit = self.settings.daily_profit_unit

        try:
            user = await self.user_repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User not found")

            if not user.daily_profit_eligible or not user.is_active(
                self.settings.activity_threshold
            ):
                raise ValidationError("User not eligible for daily profit")

            base = ensure_utc(user.last_daily_bonus_at or user.eligible_since)
            if base is None:
                user.eligible_since = now
                await self.session.commit()
                raise CooldownError(
                    "Eligibility started. Try again after "
                    f"{self.settings.daily_profit_interval_hours} hours.",
                    remaining_hours=self.settings.daily_profit_interval_hours,
                )

            elapsed = now - base
            if elapsed < interval:
                remaining = interval - elapsed
                hours = math.ceil(remaining.total_seconds() / 3600)
                raise CooldownError(
                    "Daily profit not available yet", remaining_hours=hours
                )

            user.daily_profit = (user.daily_profit or Decimal("0")) + unit
            user.last_daily_bonus_at = now
            await self.history_repo.append(
                user_id=user.id,
                source_user_id=user.id,
                name=DAILY_BONUS_ENTRY_NAME,
                email=user.email,
                entry_type=HistoryEntryType.DAILY_BONUS,
                amount=unit,
                status=HistoryStatus.PAID,
            )
            daily_profit = user.daily_profit
            await self.session.commit()

        except PlatformError:
            await self.session.rollback()
            raise
        except Exception:
            await self.session.rollback()
            logger.exception(f"Daily profit claim failed for user {user_id}")
            raise

        logger.info(
            "Daily profit credited",
            extra={"user_id": user_id, "amount": str(unit)},
        )
        return DailyProfitResult(
            amount=unit,
            daily_profit=daily_profit,
            last_daily_bonus_at=now,
        )
