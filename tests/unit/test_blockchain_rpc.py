"""Unit tests for provider failover, RPC error classification and log decoding."""

from types import SimpleNamespace

import pytest
from web3 import Web3
from web3.exceptions import MismatchedABI

from app.services.blockchain import (
    USDT_ABI,
    ChainLogFetcher,
    RangeTooLargeError,
    RpcProviderPool,
    TransientRpcError,
    endpoint_name,
    transfer_from_event,
)
from app.services.blockchain.rpc_wrapper import classify_rpc_error, is_range_too_large


ADMIN = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
SENDER = "0x1111111111111111111111111111111111111111"
TOKEN = Web3.to_checksum_address("0x55d398326f99059ff775485246999027b3197955")
TRANSFER_TOPIC = Web3.keccak(text="Transfer(address,address,uint256)")


class FakeProvider:
    def __init__(self, name, error=None, result=None):
        self.name = name
        self.error = error
        self.result = result
        self.calls = 0

    def call(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def make_pool():
    pools = []

    def _make(*providers):
        pool = RpcProviderPool(list(providers), names=[p.name for p in providers])
        pools.append(pool)
        return pool

    yield _make
    for pool in pools:
        pool.close()


class TestProviderPool:
    """Failover state machine."""

    @pytest.mark.asyncio
    async def test_primary_answers(self, make_pool):
        primary = FakeProvider("primary", result=100)
        backup = FakeProvider("backup", result=200)
        pool = make_pool(primary, backup)

        result = await pool.execute(lambda p: p.call(), "get_block_number")

        assert result == 100
        assert backup.calls == 0
        assert pool.current_name == "primary"

    @pytest.mark.asyncio
    async def test_failover_to_next_provider_and_stay_there(self, make_pool):
        primary = FakeProvider("primary", error=ConnectionError("refused"))
        backup = FakeProvider("backup", result=200)
        pool = make_pool(primary, backup)

        assert await pool.execute(lambda p: p.call(), "op") == 200
        assert pool.current_name == "backup"

        assert await pool.execute(lambda p: p.call(), "op") == 200
        assert primary.calls == 1
        assert pool.get_stats()["failover_count"] == 1

    @pytest.mark.asyncio
    async def test_each_provider_tried_once_then_transient_error(self, make_pool):
        providers = [
            FakeProvider(f"p{i}", error=ConnectionError("down")) for i in range(3)
        ]
        pool = make_pool(*providers)

        with pytest.raises(TransientRpcError):
            await pool.execute(lambda p: p.call(), "op")

        assert [p.calls for p in providers] == [1, 1, 1]

    @pytest.mark.asyncio
    async def test_range_error_is_not_failed_over(self, make_pool):
        primary = FakeProvider(
            "primary",
            error=ValueError({"code": -32005, "message": "query returned more than 10000 results"}),
        )
        backup = FakeProvider("backup", result=[])
        pool = make_pool(primary, backup)

        with pytest.raises(RangeTooLargeError):
            await pool.execute(lambda p: p.call(), "get_logs")

        assert backup.calls == 0
        assert pool.current_name == "primary"

    def test_reset_returns_to_primary(self, make_pool):
        pool = make_pool(FakeProvider("a"), FakeProvider("b"))
        pool.failover()
        assert pool.current_name == "b"

        pool.reset()

        assert pool.current_name == "a"

    def test_single_provider_cannot_fail_over(self, make_pool):
        pool = make_pool(FakeProvider("only"))

        assert pool.failover() is False

    def test_requires_a_provider(self):
        with pytest.raises(ValueError):
            RpcProviderPool([])


class TestErrorClassification:
    @pytest.mark.parametrize(
        "error",
        [
            ValueError({"code": -32005, "message": "limit exceeded"}),
            ValueError({"code": -32000, "message": "block range is too wide"}),
            Exception("eth_getLogs is limited to a 5000 block range"),
        ],
    )
    def test_range_errors(self, error):
        assert is_range_too_large(error)
        assert isinstance(classify_rpc_error(error), RangeTooLargeError)

    @pytest.mark.parametrize(
        "error",
        [
            ConnectionError("connection reset"),
            ValueError({"code": -32000, "message": "header not found"}),
            TimeoutError(),
        ],
    )
    def test_other_errors_are_transient(self, error):
        assert not is_range_too_large(error)
        assert isinstance(classify_rpc_error(error), TransientRpcError)

    def test_classified_errors_pass_through(self):
        error = RangeTooLargeError("too large")
        assert classify_rpc_error(error) is error


def _topic(address):
    return bytes(12) + bytes.fromhex(address[2:])


def _raw_log(value, to=ADMIN):
    return {
        "address": TOKEN,
        "topics": [TRANSFER_TOPIC, _topic(SENDER), _topic(to)],
        "data": value.to_bytes(32, "big"),
        "transactionHash": bytes.fromhex("ab" * 32),
        "transactionIndex": 0,
        "blockHash": bytes(32),
        "blockNumber": 12345,
        "logIndex": 7,
    }


class FakeTransferEvent:
    """contract.events.Transfer stand-in: records get_logs arguments."""

    def __init__(self, events):
        self.events = events
        self.calls = []

    def get_logs(self, **kwargs):
        self.calls.append(kwargs)
        return self.events


class FakeW3:
    def __init__(self, transfer_event):
        self.contracts = []
        self.eth = SimpleNamespace(contract=self._contract)
        self._transfer_event = transfer_event

    def _contract(self, address, abi):
        self.contracts.append(address)
        return SimpleNamespace(events=SimpleNamespace(Transfer=self._transfer_event))


class FakePool:
    def __init__(self, w3):
        self.w3 = w3

    async def execute(self, operation, operation_name):
        return operation(self.w3)


class TestTransferLogDecoding:
    def _decoded(self, raw):
        contract = Web3().eth.contract(address=TOKEN, abi=USDT_ABI)
        return contract.events.Transfer().process_log(raw)

    def test_decodes_transfer_event(self):
        log = transfer_from_event(self._decoded(_raw_log(50 * 10**18)))

        assert log.from_address == SENDER
        assert log.to_address == ADMIN
        assert log.value == 50 * 10**18
        assert log.block_number == 12345
        assert log.log_index == 7
        assert log.tx_hash == "0x" + "ab" * 32

    def test_other_events_are_rejected_by_the_abi(self):
        raw = _raw_log(1)
        raw["topics"][0] = bytes(32)

        with pytest.raises(MismatchedABI):
            self._decoded(raw)

    @pytest.mark.asyncio
    async def test_fetcher_filters_on_checksummed_recipient(self):
        event = self._decoded(_raw_log(5 * 10**18))
        transfer_event = FakeTransferEvent([event])
        w3 = FakeW3(transfer_event)
        fetcher = ChainLogFetcher(FakePool(w3), TOKEN.lower())

        logs = await fetcher.get_transfer_logs(ADMIN, 100, 200)

        assert w3.contracts == [TOKEN]
        assert transfer_event.calls == [
            {
                "from_block": 100,
                "to_block": 200,
                "argument_filters": {
                    "to": Web3.to_checksum_address(ADMIN)
                },
            }
        ]
        assert [log.value for log in logs] == [5 * 10**18]
        assert logs[0].to_address == ADMIN


def test_endpoint_name_hides_path():
    assert endpoint_name("https://bsc.example.com/v1/SECRETKEY", 0) == "bsc.example.com"
