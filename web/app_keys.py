"""
Typed application keys.

Shared objects live on the aiohttp application; handlers read them
through these keys.
"""

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.settings import Settings
from app.services.blockchain import ChunkedTransferScanner
from app.services.payout import BinancePayoutClient
from app.utils.distributed_lock import DistributedLock


SETTINGS = web.AppKey("settings", Settings)
SESSION_MAKER = web.AppKey("session_maker", async_sessionmaker[AsyncSession])
TRANSFER_SCANNER = web.AppKey("transfer_scanner", ChunkedTransferScanner)
PAYOUT_CLIENT = web.AppKey("payout_client", BinancePayoutClient)
DEPOSIT_LOCK = web.AppKey("deposit_lock", DistributedLock)
