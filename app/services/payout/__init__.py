"""Exchange payout integration."""

from .binance_client import (
    BinancePayoutClient,
    PayoutError,
    UsdtBalance,
    network_for_chain,
    payout_error_from,
)


__all__ = [
    "BinancePayoutClient",
    "PayoutError",
    "UsdtBalance",
    "network_for_chain",
    "payout_error_from",
]
