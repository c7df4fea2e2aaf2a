"""
Binance payout client.

Withdrawals and USDT balance lookups through ccxt's async Binance
exchange.
"""

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

import ccxt.async_support as ccxt
from loguru import logger

from app.config.settings import Settings, settings as default_settings
from app.utils.security import mask_address


class PayoutError(Exception):
    """Exchange refused or failed a payout call."""

    def __init__(self, message: str, code: int | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


@dataclass
class UsdtBalance:
    """USDT held on the exchange account."""

    spot_free: Decimal
    spot_locked: Decimal
    funding_free: Decimal

    @property
    def total(self) -> Decimal:
        """Spendable total (spot free + funding free)."""
        return self.spot_free + self.funding_free

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset": "USDT",
            "spot": {"free": str(self.spot_free), "locked": str(self.spot_locked)},
            "funding": {"free": str(self.funding_free)},
            "total": str(self.total),
        }


def network_for_chain(chain: str | None, default_network: str) -> str:
    """BEP-style chains map to BSC; anything else uses the configured tag."""
    if chain and "BEP" in chain.upper():
        return "BSC"
    return default_network


def payout_error_from(error: ccxt.BaseError) -> PayoutError:
    """
    Convert a ccxt error into a PayoutError.

    ccxt formats exchange rejections as ``"binance {json body}"``; the
    body's ``msg`` and ``code`` are kept when present.
    """
    text = str(error)
    _, _, body = text.partition(" ")
    try:
        data = json.loads(body)
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("msg"):
        return PayoutError(data["msg"], code=data.get("code"))
    if isinstance(error, ccxt.NetworkError):
        return PayoutError(f"Binance request failed: {text}")
    return PayoutError(text or type(error).__name__)


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value or 0))
    except InvalidOperation:
        return Decimal("0")


class BinancePayoutClient:
    """
    Minimal async client for the exchange payout API.

    Usage:
        client = BinancePayoutClient()
        payout_id = await client.withdraw("USDT", address, Decimal("80"), "BEP20")
        await client.close()
    """

    def __init__(
        self,
        app_settings: Settings | None = None,
        exchange: ccxt.Exchange | None = None,
    ) -> None:
        """
        Initialize payout client.

        Args:
            app_settings: Settings override (tests)
            exchange: Prebuilt ccxt exchange (tests)
        """
        self.settings = app_settings or default_settings
        self.api_key = self.settings.binance_api_key
        self.api_secret = self.settings.binance_api_secret
        self._exchange = exchange

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_secret)

    def _get_exchange(self) -> ccxt.Exchange:
        """Get or create the ccxt exchange."""
        if not self.is_configured:
            raise PayoutError("Binance API is not configured")
        if self._exchange is None:
            self._exchange = ccxt.binance(
                {
                    "apiKey": self.api_key,
                    "secret": self.api_secret,
                    "enableRateLimit": True,
                    "timeout": int(self.settings.payout_timeout_seconds * 1000),
                    "options": {
                        "recvWindow": self.settings.binance_recv_window,
                        "defaultType": "spot",
                    },
                }
            )
        return self._exchange

    async def close(self) -> None:
        """Close the exchange's HTTP session."""
        if self._exchange is not None:
            await self._exchange.close()
        self._exchange = None

    async def withdraw(
        self,
        coin: str,
        address: str,
        amount: Decimal,
        chain: str | None = None,
        order_id: str | None = None,
    ) -> str:
        """
        Submit a withdrawal.

        Args:
            coin: Asset, e.g. USDT
            address: Destination address
            amount: Amount in asset units
            chain: Withdrawal chain label (BEP20 -> BSC network)
            order_id: Client-side id echoed by the exchange

        Returns:
            Exchange withdrawal id

        Raises:
            PayoutError: On any failure, including a reply without id
        """
        exchange = self._get_exchange()
        params: dict[str, Any] = {
            "network": network_for_chain(chain, self.settings.binance_network),
        }
        if order_id:
            params["withdrawOrderId"] = order_id

        try:
            result = await exchange.withdraw(
                code=coin,
                amount=float(amount),
                address=address,
                params=params,
            )
        except ccxt.BaseError as e:
            raise payout_error_from(e) from e

        payout_id = result.get("id") if isinstance(result, dict) else None
        if not payout_id:
            raise PayoutError("Binance withdraw response missing id")

        logger.info(
            f"Binance withdrawal submitted: {amount} {coin} to "
            f"{mask_address(address)} (id {payout_id})"
        )
        return str(payout_id)

    async def _usdt_entry(self, wallet_type: str) -> dict[str, Any]:
        exchange = self._get_exchange()
        try:
            balances = await exchange.fetch_balance({"type": wallet_type})
        except ccxt.BaseError as e:
            raise payout_error_from(e) from e
        return balances.get("USDT") or {}

    async def get_usdt_balance(self) -> UsdtBalance:
        """
        Read USDT from spot and funding wallets.

        Each source is read independently; a failing source counts as 0.

        Raises:
            PayoutError: Client not configured
        """
        self._get_exchange()
        spot_free = spot_locked = funding_free = Decimal("0")

        try:
            spot = await self._usdt_entry("spot")
            spot_free = _to_decimal(spot.get("free"))
            spot_locked = _to_decimal(spot.get("used"))
        except PayoutError as e:
            logger.warning(f"Spot balance unavailable: {e}")

        try:
            funding = await self._usdt_entry("funding")
            funding_free = _to_decimal(funding.get("free"))
        except PayoutError as e:
            logger.warning(f"Funding balance unavailable: {e}")

        return UsdtBalance(
            spot_free=spot_free,
            spot_locked=spot_locked,
            funding_free=funding_free,
        )
