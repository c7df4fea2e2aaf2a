"""Unit tests for the exchange payout client."""

from decimal import Decimal

import ccxt.async_support as ccxt
import pytest

from app.services.payout import (
    BinancePayoutClient,
    PayoutError,
    network_for_chain,
    payout_error_from,
)


ADDRESS = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"


class FakeExchange:
    """Stands in for ccxt.binance: records calls, answers from a script."""

    def __init__(self):
        self.withdrawals = []
        self.withdraw_result = {"id": "7213fea8e94b4a5593d507237e5a555b"}
        self.withdraw_error = None
        self.balances = {
            "spot": {"USDT": {"free": 120.5, "used": 3.0, "total": 123.5}},
            "funding": {"USDT": {"free": 10.0, "used": 0.0, "total": 10.0}},
        }
        self.balance_errors = {}
        self.closed = False

    async def withdraw(self, code, amount, address, tag=None, params=None):
        self.withdrawals.append(
            {"code": code, "amount": amount, "address": address, "params": params}
        )
        if self.withdraw_error is not None:
            raise self.withdraw_error
        return self.withdraw_result

    async def fetch_balance(self, params=None):
        wallet_type = (params or {}).get("type", "spot")
        if wallet_type in self.balance_errors:
            raise self.balance_errors[wallet_type]
        return self.balances[wallet_type]

    async def close(self):
        self.closed = True


@pytest.fixture
def exchange():
    return FakeExchange()


@pytest.fixture
def client(exchange, test_settings):
    app_settings = test_settings.model_copy(
        update={"binance_api_key": "test-key", "binance_api_secret": "test-secret"}
    )
    return BinancePayoutClient(app_settings, exchange=exchange)


class TestErrorMapping:
    def test_exchange_rejection_keeps_msg_and_code(self):
        error = ccxt.InsufficientFunds(
            'binance {"code":-4026,"msg":"User has insufficient balance"}'
        )

        payout_error = payout_error_from(error)

        assert payout_error.message == "User has insufficient balance"
        assert payout_error.code == -4026

    def test_network_error(self):
        error = ccxt.RequestTimeout("binance POST https://api.binance.com timed out")

        payout_error = payout_error_from(error)

        assert payout_error.message.startswith("Binance request failed")
        assert payout_error.code is None

    def test_plain_ccxt_error_text_is_kept(self):
        payout_error = payout_error_from(ccxt.AuthenticationError("Invalid API-key"))

        assert payout_error.message == "Invalid API-key"

    @pytest.mark.parametrize(
        "chain,expected",
        [("BEP20", "BSC"), ("bep20", "BSC"), ("TRC20", "TRX"), (None, "TRX")],
    )
    def test_network_for_chain(self, chain, expected):
        assert network_for_chain(chain, "TRX") == expected


class TestWithdraw:
    @pytest.mark.asyncio
    async def test_successful_withdrawal_returns_id(self, client, exchange):
        payout_id = await client.withdraw(
            "USDT", ADDRESS, Decimal("80"), chain="BEP20", order_id="WD1"
        )

        assert payout_id == "7213fea8e94b4a5593d507237e5a555b"
        sent = exchange.withdrawals[0]
        assert sent["code"] == "USDT"
        assert sent["amount"] == 80.0
        assert sent["address"] == ADDRESS
        assert sent["params"] == {"network": "BSC", "withdrawOrderId": "WD1"}

    @pytest.mark.asyncio
    async def test_order_id_is_optional(self, client, exchange):
        await client.withdraw("USDT", ADDRESS, Decimal("12.5"), chain="TRC20")

        assert exchange.withdrawals[0]["params"] == {"network": "BSC"}

    @pytest.mark.asyncio
    async def test_exchange_error_message_is_preserved(self, client, exchange):
        exchange.withdraw_error = ccxt.InsufficientFunds(
            'binance {"code":-4026,"msg":"User has insufficient balance"}'
        )

        with pytest.raises(PayoutError) as exc_info:
            await client.withdraw("USDT", ADDRESS, Decimal("80"), "BEP20")

        assert exc_info.value.message == "User has insufficient balance"
        assert exc_info.value.code == -4026

    @pytest.mark.asyncio
    async def test_missing_id_is_an_error(self, client, exchange):
        exchange.withdraw_result = {"info": {"msg": "ok"}}

        with pytest.raises(PayoutError, match="missing id"):
            await client.withdraw("USDT", ADDRESS, Decimal("80"), "BEP20")

    @pytest.mark.asyncio
    async def test_unconfigured_client_refuses(self, test_settings, exchange):
        unconfigured = BinancePayoutClient(
            test_settings.model_copy(
                update={"binance_api_key": None, "binance_api_secret": None}
            ),
            exchange=exchange,
        )

        with pytest.raises(PayoutError, match="not configured"):
            await unconfigured.withdraw("USDT", ADDRESS, Decimal("80"))
        assert exchange.withdrawals == []

    @pytest.mark.asyncio
    async def test_close_releases_exchange(self, client, exchange):
        await client.close()

        assert exchange.closed is True


class TestUsdtBalance:
    @pytest.mark.asyncio
    async def test_spot_and_funding(self, client):
        balance = await client.get_usdt_balance()

        assert balance.spot_free == Decimal("120.5")
        assert balance.spot_locked == Decimal("3.0")
        assert balance.funding_free == Decimal("10.0")
        assert balance.total == Decimal("130.5")

    @pytest.mark.asyncio
    async def test_failing_source_counts_as_zero(self, client, exchange):
        exchange.balance_errors["funding"] = ccxt.ExchangeNotAvailable(
            'binance {"code":-1001,"msg":"service unavailable"}'
        )

        balance = await client.get_usdt_balance()

        assert balance.funding_free == Decimal("0")
        assert balance.total == Decimal("120.5")

    @pytest.mark.asyncio
    async def test_missing_asset_counts_as_zero(self, client, exchange):
        exchange.balances["spot"] = {}

        balance = await client.get_usdt_balance()

        assert balance.spot_free == Decimal("0")
        assert balance.to_dict()["total"] == "10.0"
