"""
Web Initialization - Services Module.

Module: services.py
Initializes the transfer scanner, payout client and deposit lock.
Validates environment variables.
"""

from aiohttp import web
from loguru import logger

from app.config.settings import Settings
from app.services.blockchain import init_transfer_scanner
from app.services.payout import BinancePayoutClient
from app.utils.distributed_lock import DistributedLock
from app.utils.redis_utils import get_redis_client, get_redis_url_masked
from app.utils.security import mask_secret
from web.app_keys import (
    DEPOSIT_LOCK,
    PAYOUT_CLIENT,
    SETTINGS,
    TRANSFER_SCANNER,
)


def validate_environment(settings: Settings) -> None:
    """Log misconfiguration that would only surface on first use."""
    if not settings.get_rpc_urls():
        logger.error("No BSC RPC endpoint configured")
    if not (settings.binance_api_key and settings.binance_api_secret):
        logger.warning(
            "BINANCE_API_KEY/BINANCE_API_SECRET not configured. "
            "Service will start, but withdrawal approvals will fail."
        )
    else:
        logger.info(f"Payout API key: {mask_secret(settings.binance_api_key)}")


def initialize_blockchain(app: web.Application) -> None:
    """Initialize the transfer scanner unless one was injected."""
    if TRANSFER_SCANNER in app:
        return
    app[TRANSFER_SCANNER] = init_transfer_scanner(app[SETTINGS])
    logger.info("Transfer scanner initialized successfully")


def initialize_payout(app: web.Application) -> None:
    """Initialize the exchange payout client unless one was injected."""
    if PAYOUT_CLIENT in app:
        return
    app[PAYOUT_CLIENT] = BinancePayoutClient(app[SETTINGS])


def initialize_lock(app: web.Application) -> None:
    """Redis-backed lock when enabled, in-process otherwise."""
    if DEPOSIT_LOCK in app:
        return
    cfg = app[SETTINGS]
    if cfg.redis_enabled:
        app[DEPOSIT_LOCK] = DistributedLock(get_redis_client(cfg))
        logger.info(f"Deposit lock uses Redis at {get_redis_url_masked(cfg)}")
    else:
        app[DEPOSIT_LOCK] = DistributedLock()
        logger.info("Deposit lock is process-local (Redis disabled)")


async def initialize_all_services(app: web.Application) -> None:
    """on_startup hook: initialize all services."""
    validate_environment(app[SETTINGS])
    initialize_blockchain(app)
    initialize_payout(app)
    initialize_lock(app)
