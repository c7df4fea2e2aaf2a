"""
Web main entry point.

Builds the aiohttp application and runs it.

Initialization is delegated to modular components in the
web/initialization/ directory.
"""

import sys
import warnings

from aiohttp import web
from loguru import logger


# Suppress eth_utils network warnings about invalid ChainId
# Must be set BEFORE importing any modules that use eth_utils
warnings.filterwarnings(
    "ignore",
    message=".*does not have a valid ChainId.*",
    category=UserWarning,
)

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from app.config.settings import Settings, settings as default_settings  # noqa: E402
from app.services.blockchain import ChunkedTransferScanner  # noqa: E402
from app.services.withdrawal.withdrawal_lifecycle_handler import (  # noqa: E402
    PayoutClient,
)
from app.utils.distributed_lock import DistributedLock  # noqa: E402
from web.app_keys import (  # noqa: E402
    DEPOSIT_LOCK,
    PAYOUT_CLIENT,
    SESSION_MAKER,
    SETTINGS,
    TRANSFER_SCANNER,
)
from web.handlers import register_all_routes  # noqa: E402
from web.initialization.logging import setup_logging  # noqa: E402
from web.initialization.services import initialize_all_services  # noqa: E402
from web.initialization.shutdown import dispose_engine, shutdown_handler  # noqa: E402
from web.middlewares import (  # noqa: E402
    database_middleware,
    error_middleware,
    identity_middleware,
)


def create_app(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    app_settings: Settings | None = None,
    scanner: ChunkedTransferScanner | None = None,
    payout_client: PayoutClient | None = None,
    lock: DistributedLock | None = None,
) -> web.Application:
    """
    Application factory.

    Anything not injected is built from settings on startup.

    Args:
        session_maker: Session factory (defaults to the process engine)
        app_settings: Settings override
        scanner: Transfer scanner
        payout_client: Exchange payout client
        lock: Deposit confirmation lock

    Returns:
        Configured application
    """
    app = web.Application(
        middlewares=[error_middleware, identity_middleware, database_middleware]
    )

    app[SETTINGS] = app_settings or default_settings
    if session_maker is None:
        from app.config.database import async_session_maker

        session_maker = async_session_maker
        app.on_cleanup.append(dispose_engine)
    app[SESSION_MAKER] = session_maker

    if scanner is not None:
        app[TRANSFER_SCANNER] = scanner
    if payout_client is not None:
        app[PAYOUT_CLIENT] = payout_client
    if lock is not None:
        app[DEPOSIT_LOCK] = lock

    register_all_routes(app)
    app.on_startup.append(initialize_all_services)
    app.on_cleanup.insert(0, shutdown_handler)
    return app


def main() -> None:
    """Initialize and run the web service."""
    setup_logging()
    app = create_app()
    logger.info(
        f"Listening on {default_settings.web_host}:{default_settings.web_port}"
    )
    web.run_app(
        app,
        host=default_settings.web_host,
        port=default_settings.web_port,
        print=None,
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Web service stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"Web service crashed: {e}")
        sys.exit(1)
