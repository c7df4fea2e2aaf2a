"""
User registration functionality.

Handles new user registration with referral linkage.
"""

import secrets

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.constants import REFERRAL_CODE_MAX_ATTEMPTS, REFERRAL_CODE_PREFIX
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.rank_calculator import RankCalculator
from app.utils.exceptions import ValidationError
from app.utils.security import mask_email
from app.validators.unified import validate_email


def generate_referral_code() -> str:
    """Invite code: prefix + 6 random digits."""
    return f"{REFERRAL_CODE_PREFIX}{secrets.randbelow(900000) + 100000}"


class UserRegistrationMixin:
    """
    Mixin for user registration functionality.

    Handles new user registration with referral support.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user registration mixin."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.chain_manager = ReferralChainManager(session)
        self.rank_calculator = RankCalculator(session)

    async def register_user(
        self,
        username: str,
        email: str,
        referral_code: str | None = None,
    ) -> User:
        """
        Register new user with referral support.

        Args:
            username: Display name
            email: Unique email
            referral_code: Parent's invite code (optional)

        Returns:
            Created user

        Raises:
            ValidationError: Duplicate email, bad input or unknown code
        """
        username = username.strip() if isinstance(username, str) else ""
        if not username:
            raise ValidationError("Username is required")

        is_valid, error = validate_email(email)
        if not is_valid:
            raise ValidationError(error or "Invalid email")
        email = email.strip().lower()

        if await self.user_repo.get_by_email(email):
            raise ValidationError("Email already registered")

        parent = None
        if isinstance(referral_code, str) and referral_code.strip():
            parent = await self.user_repo.get_by_referral_code(referral_code)
            if parent is None:
                raise ValidationError("Invalid referral code")

        code = await self._unique_referral_code()

        try:
            user = await self.user_repo.create(
                username=username,
                email=email,
                referral_code=code,
            )
            if parent is not None:
                await self.chain_manager.link_parent(user, parent)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Registration conflict for {mask_email(email)}: {e.orig}")
            raise ValidationError("Email already registered") from e

        parent_id = parent.id if parent is not None else None
        if parent_id is not None:
            try:
                await self.rank_calculator.recompute_level_and_rank(parent_id)
            except Exception as e:
                await self.session.rollback()
                await self.session.refresh(user)
                logger.error(f"Rank recompute failed for parent {parent_id}: {e}")

        logger.info(
            "User registered",
            extra={
                "user_id": user.id,
                "has_referrer": parent_id is not None,
            },
        )

        return user

    async def _unique_referral_code(self) -> str:
        for _ in range(REFERRAL_CODE_MAX_ATTEMPTS):
            code = generate_referral_code()
            if not await self.user_repo.exists(referral_code=code):
                return code
        raise RuntimeError("Could not allocate a unique referral code")
