"""
Chain log fetcher.

This module handles:
- Latest block height lookups
- Transfer event queries for one token contract, filtered by recipient
- Conversion of decoded events into typed transfers
"""

from dataclasses import dataclass
from typing import Any

from eth_utils import to_checksum_address
from web3 import Web3

from .core_constants import USDT_ABI
from .provider_pool import RpcProviderPool


@dataclass(frozen=True)
class TransferLog:
    """Decoded ERC-20 Transfer event."""

    tx_hash: str
    block_number: int
    log_index: int
    from_address: str
    to_address: str
    value: int  # Raw token units (scaled by the token's decimals)


def transfer_from_event(event: Any) -> TransferLog:
    """
    Build a TransferLog from a web3-decoded Transfer event.

    Args:
        event: EventData from ``contract.events.Transfer`` (reads ``args``)

    Returns:
        TransferLog with lowercase addresses and hash
    """
    args = event["args"]
    return TransferLog(
        tx_hash=Web3.to_hex(event["transactionHash"]).lower(),
        block_number=int(event["blockNumber"]),
        log_index=int(event["logIndex"]),
        from_address=args["from"].lower(),
        to_address=args["to"].lower(),
        value=int(args["value"]),
    )


class ChainLogFetcher:
    """
    Fetch Transfer logs for a fixed token contract.

    All calls go through the provider pool, so failover is handled there.
    """

    def __init__(self, pool: RpcProviderPool, token_address: str) -> None:
        """
        Initialize log fetcher.

        Args:
            pool: Provider pool
            token_address: Token contract address
        """
        self.pool = pool
        self.token_address = to_checksum_address(token_address)

    def _contract(self, w3: Any) -> Any:
        return w3.eth.contract(address=self.token_address, abi=USDT_ABI)

    async def get_latest_block(self) -> int:
        """
        Get current chain height.

        Raises:
            TransientRpcError: If no provider answers
        """
        block_number = await self.pool.execute(
            operation=lambda w3: w3.eth.block_number,
            operation_name="get_block_number",
        )
        return int(block_number)

    async def get_transfer_logs(
        self, recipient: str, from_block: int, to_block: int
    ) -> list[TransferLog]:
        """
        Get Transfer logs to the recipient within [from_block, to_block].

        Args:
            recipient: Receiving address (indexed "to" argument)
            from_block: First block (inclusive)
            to_block: Last block (inclusive)

        Returns:
            Decoded transfers

        Raises:
            RangeTooLargeError: Provider refused the range
            TransientRpcError: Every provider failed
        """
        receiver = to_checksum_address(recipient)

        events = await self.pool.execute(
            operation=lambda w3: self._contract(w3).events.Transfer.get_logs(
                from_block=from_block,
                to_block=to_block,
                argument_filters={"to": receiver},
            ),
            operation_name=f"get_logs[{from_block}-{to_block}]",
        )

        return [transfer_from_event(event) for event in events]
