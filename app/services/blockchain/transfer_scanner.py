"""
Chunked transfer scanner.

Walks backward from the latest block over a bounded lookback window in
bounded-size chunks, looking for an inbound token transfer of at least a
given amount. Provider failures on a chunk never abort the scan: the chunk
is retried within a small budget and then skipped.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal

from loguru import logger

from app.config.constants import (
    DEFAULT_SCAN_CHUNK_PAUSE_SECONDS,
    DEFAULT_SCAN_MAX_CHUNK_SPAN,
    DEFAULT_SCAN_MIN_CHUNK_SPAN,
    DEFAULT_SCAN_RETRY_DELAY_SECONDS,
)
from app.utils.security import mask_address, mask_tx_hash

from .log_fetcher import ChainLogFetcher, TransferLog
from .rpc_wrapper import BlockchainError, RangeTooLargeError


@dataclass(frozen=True)
class TransferMatch:
    """Qualifying transfer found on chain."""

    tx_hash: str
    from_address: str
    to_address: str
    value: int  # Raw token units
    amount: Decimal  # value / 10**decimals, exact
    block_number: int
    log_index: int


@dataclass
class ScanStats:
    """Bookkeeping for one scan, for logs and tests."""

    latest_block: int | None = None
    oldest_block: int | None = None
    chunks_scanned: int = 0
    chunks_skipped: int = 0
    range_shrinks: int = 0
    windows: list[tuple[int, int]] = field(default_factory=list)


def to_token_units(amount: Decimal, decimals: int) -> int:
    """
    Smallest raw value that is >= amount at the given precision.

    Args:
        amount: Human amount (e.g. Decimal("50"))
        decimals: Token decimals

    Returns:
        Integer token units
    """
    scaled = amount * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_CEILING))


def from_token_units(value: int, decimals: int) -> Decimal:
    """Exact human amount for a raw token value."""
    return Decimal(value) / (Decimal(10) ** decimals)


class ChunkedTransferScanner:
    """
    Find the most recent qualifying inbound transfer.

    Usage:
        scanner = ChunkedTransferScanner(fetcher, decimals=18)
        match = await scanner.scan(admin_wallet, Decimal("50"), 60000)
    """

    def __init__(
        self,
        fetcher: ChainLogFetcher,
        decimals: int,
        max_chunk_span: int = DEFAULT_SCAN_MAX_CHUNK_SPAN,
        min_chunk_span: int = DEFAULT_SCAN_MIN_CHUNK_SPAN,
        chunk_pause: float = DEFAULT_SCAN_CHUNK_PAUSE_SECONDS,
        retry_delay: float = DEFAULT_SCAN_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize scanner.

        Args:
            fetcher: Log fetcher bound to the token contract
            decimals: Token decimals
            max_chunk_span: Largest window per log query
            min_chunk_span: Floor when shrinking on range errors
            chunk_pause: Pause between windows
            retry_delay: Pause before the single transient retry
            sleep: Sleep coroutine (injectable for tests)
        """
        if min_chunk_span <= 0 or max_chunk_span <= 0:
            raise ValueError("Chunk spans must be positive")

        self.fetcher = fetcher
        self.decimals = decimals
        self.max_chunk_span = max(max_chunk_span, min_chunk_span)
        self.min_chunk_span = min_chunk_span
        self.chunk_pause = chunk_pause
        self.retry_delay = retry_delay
        self._sleep = sleep
        self.last_stats = ScanStats()

    async def scan(
        self,
        recipient: str,
        min_amount: Decimal,
        lookback_blocks: int,
    ) -> TransferMatch | None:
        """
        Scan [latest - lookback_blocks, latest] newest-first.

        Args:
            recipient: Receiving address
            min_amount: Minimum human amount (inclusive)
            lookback_blocks: How far back to look

        Returns:
            First (most recent) qualifying transfer, or None
        """
        stats = ScanStats()
        self.last_stats = stats
        recipient = recipient.lower()
        need = to_token_units(min_amount, self.decimals)

        try:
            latest = await self.fetcher.get_latest_block()
        except BlockchainError as e:
            logger.error(f"[Transfer Scan] Cannot read latest block: {e}")
            return None

        oldest = max(latest - lookback_blocks, 1)
        stats.latest_block = latest
        stats.oldest_block = oldest

        logger.info(
            f"[Transfer Scan] Searching transfers to {mask_address(recipient)} "
            f">= {min_amount} in blocks {oldest}-{latest}"
        )

        span = self.max_chunk_span
        to_block = latest
        while to_block >= oldest:
            from_block, logs, span = await self._fetch_chunk(
                recipient, to_block, oldest, span, stats
            )

            match = self._pick_match(logs, recipient, need)
            if match is not None:
                logger.success(
                    f"[Transfer Scan] Match {mask_tx_hash(match.tx_hash)} "
                    f"from {mask_address(match.from_address)}: "
                    f"{match.amount} at block {match.block_number}"
                )
                return match

            to_block = from_block - 1
            if to_block >= oldest and self.chunk_pause > 0:
                await self._sleep(self.chunk_pause)

        logger.warning(
            f"[Transfer Scan] No qualifying transfer to "
            f"{mask_address(recipient)} in blocks {oldest}-{latest} "
            f"(chunks={stats.chunks_scanned}, skipped={stats.chunks_skipped})"
        )
        return None

    async def _fetch_chunk(
        self,
        recipient: str,
        to_block: int,
        oldest: int,
        span: int,
        stats: ScanStats,
    ) -> tuple[int, list[TransferLog], int]:
        """
        Fetch one window ending at to_block.

        Returns:
            (from_block, logs, span to use for the next window)
            logs is empty when the window was skipped
        """
        transient_retry_used = False

        while True:
            window = min(span, to_block - oldest + 1)
            from_block = to_block - window + 1
            stats.windows.append((from_block, to_block))

            try:
                logs = await self.fetcher.get_transfer_logs(
                    recipient, from_block, to_block
                )
                stats.chunks_scanned += 1
                return from_block, logs, span

            except RangeTooLargeError as e:
                if window <= self.min_chunk_span:
                    logger.warning(
                        f"[Transfer Scan] Range {from_block}-{to_block} still "
                        f"too large at minimum span, skipping: {e}"
                    )
                    stats.chunks_skipped += 1
                    return from_block, [], span
                smaller = max(self.min_chunk_span, window // 2)
                logger.debug(
                    f"[Transfer Scan] Range too large for {window} blocks, "
                    f"shrinking to {smaller}"
                )
                stats.range_shrinks += 1
                span = smaller

            except BlockchainError as e:
                if transient_retry_used:
                    logger.warning(
                        f"[Transfer Scan] Chunk {from_block}-{to_block} "
                        f"failed twice, skipping: {e}"
                    )
                    stats.chunks_skipped += 1
                    return from_block, [], span

                transient_retry_used = True
                span = max(self.min_chunk_span, window // 2)
                logger.warning(
                    f"[Transfer Scan] Chunk {from_block}-{to_block} failed, "
                    f"retrying with span {span}: {e}"
                )
                await self._sleep(self.retry_delay)

    def _pick_match(
        self, logs: list[TransferLog], recipient: str, need: int
    ) -> TransferMatch | None:
        ordered = sorted(
            logs, key=lambda log: (log.block_number, log.log_index), reverse=True
        )
        for log in ordered:
            if log.to_address.lower() != recipient:
                continue
            if log.value < need:
                continue
            return TransferMatch(
                tx_hash=log.tx_hash,
                from_address=log.from_address,
                to_address=log.to_address,
                value=log.value,
                amount=from_token_units(log.value, self.decimals),
                block_number=log.block_number,
                log_index=log.log_index,
            )
        return None


async def scan_with_timeout(
    scanner: ChunkedTransferScanner,
    recipient: str,
    min_amount: Decimal,
    lookback_blocks: int,
    timeout: float,
) -> TransferMatch | None:
    """
    Run a scan with a wall-clock bound.

    A scan that runs out of time is abandoned and reported as no match;
    it has written nothing.
    """
    try:
        return await asyncio.wait_for(
            scanner.scan(recipient, min_amount, lookback_blocks),
            timeout=timeout,
        )
    except TimeoutError:
        logger.warning(
            f"[Transfer Scan] Abandoned after {timeout}s for "
            f"{mask_address(recipient)}"
        )
        return None
