"""
User service module.

Provides user management functionality: registration, daily profit
claims and level/rank reads.

Structure:
- core.py: User retrieval and level/rank
- registration.py: User registration with referral support
- daily_profit.py: Daily profit claims

Usage:
    from app.services.user import UserService

    user_service = UserService(session)
    user = await user_service.register_user("alice", "alice@example.com", "REF123456")
    result = await user_service.claim_daily_profit(user.id)
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import Settings
from app.services.referral.rank_calculator import RankCalculator
from app.services.user.core import UserServiceCore
from app.services.user.daily_profit import DailyProfitMixin, DailyProfitResult
from app.services.user.registration import (
    UserRegistrationMixin,
    generate_referral_code,
)


class UserService(
    UserServiceCore,
    UserRegistrationMixin,
    DailyProfitMixin,
):
    """
    Combined user service.

    Inherits from all user service mixins to provide complete functionality.
    """

    def __init__(
        self, session: AsyncSession, app_settings: Settings | None = None
    ) -> None:
        """
        Initialize user service with all mixins.

        Args:
            session: Database session
            app_settings: Settings override (tests)
        """
        UserServiceCore.__init__(self, session)
        UserRegistrationMixin.__init__(self, session)
        DailyProfitMixin.__init__(self, session, app_settings)
        self.rank_calculator = RankCalculator(
            session, threshold=self.settings.activity_threshold
        )


__all__ = [
    "DailyProfitResult",
    "UserService",
    "generate_referral_code",
]
