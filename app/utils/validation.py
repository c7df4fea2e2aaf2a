"""
On-chain identifier checks.

Addresses and transaction hashes are compared and stored lowercase.
"""

from loguru import logger
from web3 import Web3

from app.utils.exceptions import ValidationError
from app.validators.unified import validate_wallet_address


ZERO_ADDRESS = "0x" + "0" * 40
TX_HASH_LENGTH = 66


def validate_bsc_address(address: str, checksum: bool = True) -> bool:
    """
    Validate BSC wallet address.

    Args:
        address: Wallet address
        checksum: Also require a valid EIP-55 checksum

    Returns:
        True if valid
    """
    is_valid, _ = validate_wallet_address(address)
    if not is_valid:
        return False

    if checksum:
        try:
            return Web3.is_checksum_address(address.strip())
        except (ValueError, TypeError) as e:
            logger.debug(f"Checksum validation failed for {address}: {e}")
            return False

    return True


def is_valid_payout_address(address: str) -> bool:
    """
    Check if an address can receive a withdrawal.

    Stricter than validate_bsc_address: the zero address is rejected.
    """
    if not validate_bsc_address(address, checksum=False):
        return False
    return address.strip().lower() != ZERO_ADDRESS


def validate_transaction_hash(tx_hash: str) -> bool:
    """0x followed by 64 hex characters."""
    if not tx_hash or not isinstance(tx_hash, str):
        return False
    if not tx_hash.startswith(("0x", "0X")) or len(tx_hash) != TX_HASH_LENGTH:
        return False
    try:
        int(tx_hash[2:], 16)
    except ValueError:
        return False
    return True


def normalize_tx_hash(tx_hash: str) -> str:
    """
    Canonical form of a transaction hash (the credited-payment key).

    Raises:
        ValidationError: Not a transaction hash
    """
    tx_hash = tx_hash.strip() if isinstance(tx_hash, str) else ""
    if not validate_transaction_hash(tx_hash):
        raise ValidationError("Invalid transaction hash")
    return "0x" + tx_hash[2:].lower()


def normalize_address(address: str) -> str:
    """
    Canonical form of an address for storage and comparison.

    Raises:
        ValidationError: Not an address
    """
    if not validate_bsc_address(address, checksum=False):
        raise ValidationError("Invalid address")
    return address.strip().lower()
