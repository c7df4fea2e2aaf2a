"""
Web Initialization - Shutdown Module.

Module: shutdown.py
Handles graceful shutdown of the web service.
Closes HTTP clients, Redis and database connections.
"""

from aiohttp import web
from loguru import logger

from app.services.blockchain import close_transfer_scanner
from web.app_keys import DEPOSIT_LOCK, PAYOUT_CLIENT


async def shutdown_handler(app: web.Application) -> None:
    """on_cleanup hook: handle graceful shutdown."""
    logger.info("Graceful shutdown initiated...")

    try:
        if PAYOUT_CLIENT in app:
            await app[PAYOUT_CLIENT].close()
    except Exception as e:
        logger.warning(f"Error closing payout client: {e}")

    try:
        close_transfer_scanner()
    except Exception as e:
        logger.warning(f"Error closing transfer scanner: {e}")

    try:
        lock = app.get(DEPOSIT_LOCK)
        if lock is not None and lock.redis_client is not None:
            await lock.redis_client.aclose()
            logger.info("Redis connection closed")
    except Exception as e:
        logger.warning(f"Error closing Redis: {e}")

    logger.info("Graceful shutdown complete")


async def dispose_engine(app: web.Application) -> None:
    """Close database connections of the process-wide engine."""
    try:
        from app.config.database import engine

        await engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning(f"Error closing database: {e}")
