"""
Base repository.

Generic reads and inserts shared by all repositories. Ledger decisions
always go through get_fresh or get_for_update so they never act on a
stale identity-map copy.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import exists as sql_exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository for one SQLAlchemy model.

    Example:
        class WithdrawalRepository(BaseRepository[Withdrawal]):
            def __init__(self, session: AsyncSession):
                super().__init__(Withdrawal, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    def _by_id(self, id: int) -> Select:
        return (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )

    async def get_by_id(self, id: int) -> ModelType | None:
        """Get entity by ID (identity map allowed)."""
        return await self.session.get(self.model, id)

    async def get_fresh(self, id: int) -> ModelType | None:
        """
        Get entity re-read from the database.

        Balances change under concurrent requests; the identity-map copy
        is overwritten with the current row.
        """
        result = await self.session.execute(self._by_id(id))
        return result.scalar_one_or_none()

    async def get_for_update(self, id: int) -> ModelType | None:
        """
        Get entity with a row lock (SELECT ... FOR UPDATE).

        The row stays locked until the surrounding transaction ends.
        """
        result = await self.session.execute(self._by_id(id).with_for_update())
        return result.scalar_one_or_none()

    async def get_by(self, **filters: Any) -> ModelType | None:
        """
        Get single entity by column filters.

        Only meant for unique columns (email, referral code, tx id).
        """
        stmt = select(self.model).filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **data: Any) -> ModelType:
        """
        Insert a new entity and flush it (no commit).

        Returns:
            Created entity with server defaults loaded
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def exists(self, **filters: Any) -> bool:
        """Whether any row matches the column filters."""
        stmt = select(sql_exists().where(
            *(getattr(self.model, key) == value for key, value in filters.items())
        ))
        result = await self.session.execute(stmt)
        return bool(result.scalar())
