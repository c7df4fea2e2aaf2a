"""Unit tests for the chunked transfer scanner."""

import asyncio
from decimal import Decimal

import pytest

from app.services.blockchain import (
    ChunkedTransferScanner,
    RangeTooLargeError,
    TransferLog,
    TransientRpcError,
    from_token_units,
    scan_with_timeout,
    to_token_units,
)


ADMIN = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
SENDER = "0x1111111111111111111111111111111111111111"
OTHER = "0x2222222222222222222222222222222222222222"
UNIT = 10**18


def transfer(block, value, to=ADMIN, log_index=0, tx=None):
    return TransferLog(
        tx_hash=tx or f"0x{block:064x}",
        block_number=block,
        log_index=log_index,
        from_address=SENDER,
        to_address=to,
        value=value,
    )


class FakeFetcher:
    """In-memory chain: a latest block and a list of transfers."""

    def __init__(self, latest, logs=(), failures=None):
        self.latest = latest
        self.logs = list(logs)
        # (from_block, to_block) -> list of exceptions raised in order
        self.failures = failures or {}
        self.calls = []

    async def get_latest_block(self):
        return self.latest

    async def get_transfer_logs(self, recipient, from_block, to_block):
        self.calls.append((from_block, to_block))
        planned = self.failures.get((from_block, to_block))
        if planned:
            raise planned.pop(0)
        return [
            log for log in self.logs
            if from_block <= log.block_number <= to_block
            and log.to_address == recipient
        ]


class SpanLimitedFetcher(FakeFetcher):
    """Rejects any window wider than max_span."""

    def __init__(self, latest, max_span, logs=()):
        super().__init__(latest, logs)
        self.max_span = max_span

    async def get_transfer_logs(self, recipient, from_block, to_block):
        if to_block - from_block + 1 > self.max_span:
            self.calls.append((from_block, to_block))
            raise RangeTooLargeError("block range is too large")
        return await super().get_transfer_logs(recipient, from_block, to_block)


async def no_sleep(_seconds):
    return None


def make_scanner(fetcher, max_span=3000, min_span=500, **kwargs):
    return ChunkedTransferScanner(
        fetcher,
        decimals=18,
        max_chunk_span=max_span,
        min_chunk_span=min_span,
        chunk_pause=0,
        retry_delay=0,
        sleep=no_sleep,
        **kwargs,
    )


class TestTokenUnits:
    """Amount <-> raw unit conversion."""

    def test_to_token_units_exact(self):
        assert to_token_units(Decimal("50"), 18) == 50 * UNIT

    def test_to_token_units_rounds_up(self):
        assert to_token_units(Decimal("0.0000001"), 6) == 1

    def test_from_token_units(self):
        assert from_token_units(50 * UNIT + UNIT // 2, 18) == Decimal("50.5")


class TestScanWindows:
    """Chunking and ordering."""

    @pytest.mark.asyncio
    async def test_match_in_first_chunk(self):
        """A deposit near the head is found by the first window."""
        fetcher = FakeFetcher(
            latest=1_000_000, logs=[transfer(999_500, 50 * UNIT)]
        )
        scanner = make_scanner(fetcher)

        match = await scanner.scan(ADMIN, Decimal("50"), 60_000)

        assert match is not None
        assert match.block_number == 999_500
        assert match.amount == Decimal("50")
        assert fetcher.calls == [(997_001, 1_000_000)]

    @pytest.mark.asyncio
    async def test_windows_walk_newest_first_and_stop_at_oldest(self):
        """Windows are contiguous, newest first, and clipped at the lookback."""
        fetcher = FakeFetcher(latest=10_000)
        scanner = make_scanner(fetcher, max_span=3000)

        match = await scanner.scan(ADMIN, Decimal("50"), 7000)

        assert match is None
        assert fetcher.calls == [
            (7001, 10_000),
            (4001, 7000),
            (3000, 4000),
        ]
        assert scanner.last_stats.oldest_block == 3000
        assert scanner.last_stats.chunks_scanned == 3

    @pytest.mark.asyncio
    async def test_oldest_block_never_below_one(self):
        fetcher = FakeFetcher(latest=100)
        scanner = make_scanner(fetcher)

        await scanner.scan(ADMIN, Decimal("50"), 60_000)

        assert fetcher.calls == [(1, 100)]

    @pytest.mark.asyncio
    async def test_most_recent_qualifying_transfer_wins(self):
        fetcher = FakeFetcher(
            latest=10_000,
            logs=[
                transfer(9_000, 60 * UNIT, tx="0xold"),
                transfer(9_500, 70 * UNIT, tx="0xnew", log_index=1),
                transfer(9_500, 80 * UNIT, tx="0xfirst", log_index=0),
            ],
        )
        scanner = make_scanner(fetcher)

        match = await scanner.scan(ADMIN, Decimal("50"), 5000)

        assert match.tx_hash == "0xnew"

    @pytest.mark.asyncio
    async def test_smaller_transfers_are_ignored(self):
        fetcher = FakeFetcher(
            latest=10_000,
            logs=[
                transfer(9_900, 49 * UNIT, tx="0xsmall"),
                transfer(8_000, 50 * UNIT, tx="0xenough"),
            ],
        )
        scanner = make_scanner(fetcher)

        match = await scanner.scan(ADMIN, Decimal("50"), 5000)

        assert match.tx_hash == "0xenough"

    @pytest.mark.asyncio
    async def test_comparison_uses_integer_units(self):
        """One raw unit short of the minimum does not qualify."""
        fetcher = FakeFetcher(
            latest=10_000, logs=[transfer(9_999, 50 * UNIT - 1)]
        )
        scanner = make_scanner(fetcher)

        assert await scanner.scan(ADMIN, Decimal("50"), 5000) is None

    @pytest.mark.asyncio
    async def test_transfers_to_other_addresses_are_ignored(self):
        fetcher = FakeFetcher(
            latest=10_000, logs=[transfer(9_999, 100 * UNIT, to=OTHER)]
        )
        scanner = make_scanner(fetcher)

        assert await scanner.scan(ADMIN, Decimal("50"), 5000) is None

    @pytest.mark.asyncio
    async def test_recipient_is_case_insensitive(self):
        fetcher = FakeFetcher(
            latest=10_000, logs=[transfer(9_999, 100 * UNIT)]
        )
        scanner = make_scanner(fetcher)

        match = await scanner.scan(
            "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0", Decimal("50"), 5000
        )

        assert match is not None


class TestScanFailures:
    """Provider errors shrink, retry or skip a window; never abort."""

    @pytest.mark.asyncio
    async def test_range_too_large_shrinks_span(self):
        fetcher = SpanLimitedFetcher(
            latest=10_000, max_span=1000, logs=[transfer(9_100, 50 * UNIT)]
        )
        scanner = make_scanner(fetcher, max_span=4000, min_span=500)

        match = await scanner.scan(ADMIN, Decimal("50"), 5000)

        assert match is not None
        assert scanner.last_stats.range_shrinks == 2
        # 4000 -> 2000 -> 1000, then the smaller span is kept
        assert fetcher.calls[:3] == [
            (6001, 10_000),
            (8001, 10_000),
            (9001, 10_000),
        ]

    @pytest.mark.asyncio
    async def test_shrunk_span_persists_for_later_windows(self):
        fetcher = SpanLimitedFetcher(latest=10_000, max_span=1000)
        scanner = make_scanner(fetcher, max_span=2000, min_span=500)

        await scanner.scan(ADMIN, Decimal("50"), 3000)

        assert fetcher.calls == [
            (8001, 10_000),
            (9001, 10_000),
            (8001, 9000),
            (7001, 8000),
            (7000, 7000),
        ]

    @pytest.mark.asyncio
    async def test_window_skipped_when_minimum_span_still_too_large(self):
        fetcher = SpanLimitedFetcher(latest=10_000, max_span=100)
        scanner = make_scanner(fetcher, max_span=1000, min_span=500)

        match = await scanner.scan(ADMIN, Decimal("50"), 1499)

        assert match is None
        assert scanner.last_stats.chunks_skipped == 3
        assert scanner.last_stats.chunks_scanned == 0

    @pytest.mark.asyncio
    async def test_short_last_window_is_shrunk_before_skipping(self):
        """The tail window near the oldest block is halved like any other."""

        class DenseTailFetcher(FakeFetcher):
            async def get_transfer_logs(self, recipient, from_block, to_block):
                if from_block < 7000 and to_block - from_block + 1 > 600:
                    self.calls.append((from_block, to_block))
                    raise RangeTooLargeError(
                        "query returned more than 10000 results"
                    )
                return await super().get_transfer_logs(
                    recipient, from_block, to_block
                )

        fetcher = DenseTailFetcher(
            latest=10_000, logs=[transfer(6_900, 60 * UNIT)]
        )
        scanner = make_scanner(fetcher, max_span=3000, min_span=500)

        match = await scanner.scan(ADMIN, Decimal("50"), 3800)

        assert match is not None
        assert match.block_number == 6_900
        assert fetcher.calls == [(7001, 10_000), (6200, 7000), (6501, 7000)]
        assert scanner.last_stats.range_shrinks == 1
        assert scanner.last_stats.chunks_skipped == 0

    @pytest.mark.asyncio
    async def test_transient_error_retries_once_with_half_span(self):
        fetcher = FakeFetcher(
            latest=10_000,
            logs=[transfer(9_800, 50 * UNIT)],
            failures={(7001, 10_000): [TransientRpcError("502 Bad Gateway")]},
        )
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        scanner = ChunkedTransferScanner(
            fetcher,
            decimals=18,
            max_chunk_span=3000,
            min_chunk_span=500,
            chunk_pause=0,
            retry_delay=1.5,
            sleep=record_sleep,
        )

        match = await scanner.scan(ADMIN, Decimal("50"), 5000)

        assert match is not None
        assert fetcher.calls == [(7001, 10_000), (8501, 10_000)]
        assert sleeps == [1.5]

    @pytest.mark.asyncio
    async def test_second_transient_failure_skips_window_and_continues(self):
        fetcher = FakeFetcher(
            latest=10_000,
            logs=[transfer(6_000, 50 * UNIT)],
            failures={
                (7001, 10_000): [TransientRpcError("timeout")],
                (8501, 10_000): [TransientRpcError("timeout again")],
            },
        )
        scanner = make_scanner(fetcher, max_span=3000, min_span=500)

        match = await scanner.scan(ADMIN, Decimal("50"), 5000)

        assert match is not None
        assert match.block_number == 6_000
        assert scanner.last_stats.chunks_skipped == 1
        assert fetcher.calls[2] == (7001, 8500)

    @pytest.mark.asyncio
    async def test_latest_block_failure_returns_none(self):
        class BrokenFetcher(FakeFetcher):
            async def get_latest_block(self):
                raise TransientRpcError("all providers down")

        scanner = make_scanner(BrokenFetcher(latest=0))

        assert await scanner.scan(ADMIN, Decimal("50"), 5000) is None

    @pytest.mark.asyncio
    async def test_pause_between_windows(self):
        fetcher = FakeFetcher(latest=10_000)
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        scanner = ChunkedTransferScanner(
            fetcher,
            decimals=18,
            max_chunk_span=3000,
            min_chunk_span=500,
            chunk_pause=0.2,
            retry_delay=0,
            sleep=record_sleep,
        )

        await scanner.scan(ADMIN, Decimal("50"), 7000)

        assert sleeps == [0.2, 0.2]


class TestScanTimeout:
    @pytest.mark.asyncio
    async def test_timeout_returns_none(self):
        class SlowFetcher(FakeFetcher):
            async def get_transfer_logs(self, recipient, from_block, to_block):
                await asyncio.sleep(10)
                return []

        scanner = make_scanner(SlowFetcher(latest=10_000))

        result = await scan_with_timeout(
            scanner, ADMIN, Decimal("50"), 5000, timeout=0.05
        )

        assert result is None
