"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment; must be set before anything imports app.config
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ADMIN_WALLET_ADDRESS", "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0")
os.environ.setdefault("BSC_RPC_PRIMARY", "https://bsc-dataseed.binance.org/")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REDIS_ENABLED", "false")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from decimal import Decimal  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config.database import create_session_maker  # noqa: E402
from app.config.settings import Settings  # noqa: E402
from app.models import Base, User  # noqa: E402


ADMIN_WALLET = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.delete = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest.fixture
def test_settings():
    """Settings with fast scan timings and exchange credentials."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        admin_wallet_address=ADMIN_WALLET,
        bsc_rpc_primary="https://bsc-dataseed.binance.org/",
        environment="test",
        scan_chunk_pause_seconds=0,
        scan_retry_delay_seconds=0,
        scan_timeout_seconds=5,
        binance_api_key="test-key",
        binance_api_secret="test-secret",
    )


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    """Session factory bound to the test engine."""
    return create_session_maker(db_engine)


@pytest_asyncio.fixture
async def db_session(session_maker):
    """One AsyncSession per test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """
    Factory that inserts a user directly.

    Usage:
        alice = await make_user("alice", balance=Decimal("100"))
        bob = await make_user("bob", parent=alice)
    """
    counter = {"n": 0}

    async def _make_user(
        name: str,
        parent: User | None = None,
        balance: Decimal | str = "0",
        **fields,
    ) -> User:
        counter["n"] += 1
        user = User(
            username=name,
            email=f"{name}@example.com",
            referral_code=fields.pop("referral_code", f"REF{100000 + counter['n']}"),
            parent_id=parent.id if parent is not None else None,
            balance=Decimal(str(balance)),
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def sample_wallet_address():
    """Sample valid BSC wallet address for testing."""
    return "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"


@pytest.fixture
def sample_transaction_hash():
    """Sample transaction hash for testing."""
    return "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef"
