#!/usr/bin/env python3
"""
Create the schema straight from the models.

For local and test databases; deployed databases are migrated with
Alembic instead.

Usage:
    python scripts/init_database.py [--drop]
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger  # noqa: E402

from app.config.database import create_engine  # noqa: E402
from app.config.settings import settings  # noqa: E402
from app.models import Base  # noqa: E402

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")


async def init_database(drop: bool = False) -> None:
    """Create users, credited_payments, referral_history and withdrawals."""
    if drop and settings.is_production:
        logger.error("Refusing to drop tables in production")
        sys.exit(1)

    engine = create_engine(echo=False)
    try:
        async with engine.begin() as conn:
            if drop:
                logger.warning("Dropping all tables...")
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    finally:
        await engine.dispose()

    tables = ", ".join(sorted(Base.metadata.tables))
    logger.success(f"Schema ready: {tables}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--drop", action="store_true", help="drop existing tables first"
    )
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    asyncio.run(init_database(drop=args.drop))
