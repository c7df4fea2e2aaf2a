"""
Singleton pattern for the transfer scanner.

Provides global access to a single scanner (and its provider pool), so
provider failover state is shared by every request in the process.
"""

from app.config.settings import Settings

from .log_fetcher import ChainLogFetcher
from .provider_pool import RpcProviderPool
from .transfer_scanner import ChunkedTransferScanner


_transfer_scanner: ChunkedTransferScanner | None = None


def build_transfer_scanner(settings: Settings) -> ChunkedTransferScanner:
    """
    Wire provider pool -> log fetcher -> scanner from settings.

    Args:
        settings: Application settings

    Returns:
        New scanner instance
    """
    pool = RpcProviderPool.from_urls(settings.get_rpc_urls())
    fetcher = ChainLogFetcher(pool, settings.usdt_contract_address)
    return ChunkedTransferScanner(
        fetcher,
        decimals=settings.usdt_decimals,
        max_chunk_span=settings.scan_max_chunk_span,
        min_chunk_span=settings.scan_min_chunk_span,
        chunk_pause=settings.scan_chunk_pause_seconds,
        retry_delay=settings.scan_retry_delay_seconds,
    )


def init_transfer_scanner(settings: Settings) -> ChunkedTransferScanner:
    """
    Initialize the singleton scanner instance.

    Args:
        settings: Application settings
    """
    global _transfer_scanner
    _transfer_scanner = build_transfer_scanner(settings)
    return _transfer_scanner


def close_transfer_scanner() -> None:
    """Release the provider pool's thread pool."""
    global _transfer_scanner
    if _transfer_scanner is not None:
        _transfer_scanner.fetcher.pool.close()
        _transfer_scanner = None
