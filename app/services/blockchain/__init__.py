"""
Blockchain services module.

Provider pool, log fetching and the chunked deposit scanner.
"""

from .core_constants import USDT_ABI
from .log_fetcher import ChainLogFetcher, TransferLog, transfer_from_event
from .provider_pool import RpcProviderPool, endpoint_name
from .rpc_wrapper import (
    BlockchainError,
    BlockchainTimeoutError,
    RangeTooLargeError,
    TransientRpcError,
)
from .singleton import (
    build_transfer_scanner,
    close_transfer_scanner,
    init_transfer_scanner,
)
from .transfer_scanner import (
    ChunkedTransferScanner,
    ScanStats,
    TransferMatch,
    from_token_units,
    scan_with_timeout,
    to_token_units,
)


__all__ = [
    "BlockchainError",
    "BlockchainTimeoutError",
    "ChainLogFetcher",
    "ChunkedTransferScanner",
    "RangeTooLargeError",
    "RpcProviderPool",
    "ScanStats",
    "TransferLog",
    "TransferMatch",
    "TransientRpcError",
    "USDT_ABI",
    "build_transfer_scanner",
    "close_transfer_scanner",
    "endpoint_name",
    "from_token_units",
    "init_transfer_scanner",
    "scan_with_timeout",
    "to_token_units",
    "transfer_from_event",
]
