"""
RPC Wrapper with Timeout and Error Classification.

Provides centralized timeout handling and maps raw provider failures to
the blockchain error hierarchy.
"""

import asyncio
from typing import Any

from loguru import logger

from app.config.constants import (
    BLOCKCHAIN_TIMEOUT,
    RANGE_TOO_LARGE_ERROR_CODES,
    RANGE_TOO_LARGE_MARKERS,
)


class BlockchainError(Exception):
    """Base exception for blockchain errors."""
    pass


class RangeTooLargeError(BlockchainError):
    """Provider refused a log query because the block range is too wide."""
    pass


class TransientRpcError(BlockchainError):
    """Provider failed in a way that may succeed on retry."""
    pass


class BlockchainTimeoutError(TransientRpcError):
    """Raised when blockchain RPC call times out."""
    pass


async def with_timeout(
    coro: Any,
    timeout: float = BLOCKCHAIN_TIMEOUT,
    operation_name: str = "RPC call",
) -> Any:
    """
    Execute async coroutine with timeout.

    Args:
        coro: Coroutine to execute
        timeout: Timeout in seconds (default: BLOCKCHAIN_TIMEOUT)
        operation_name: Operation name for logging

    Returns:
        Result of the coroutine

    Raises:
        BlockchainTimeoutError: If operation times out
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError as e:
        error_msg = f"{operation_name} timed out after {timeout}s"
        logger.error(error_msg)
        raise BlockchainTimeoutError(error_msg) from e


def _extract_error_payload(exc: BaseException) -> tuple[int | None, str]:
    """
    Pull (code, message) out of the shapes web3 uses for JSON-RPC errors.

    web3 v7 attaches the raw response as ``rpc_response``; older releases
    raise ValueError with the error dict as the first argument.
    """
    payload: Any = None

    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict):
        payload = rpc_response.get("error", rpc_response)

    if payload is None and exc.args and isinstance(exc.args[0], dict):
        payload = exc.args[0]

    if isinstance(payload, dict):
        code = payload.get("code")
        message = str(payload.get("message", "")) or str(exc)
        try:
            return (int(code) if code is not None else None), message
        except (TypeError, ValueError):
            return None, message

    return None, str(exc)


def is_range_too_large(exc: BaseException) -> bool:
    """
    Check whether a provider error means "block range too large".

    Args:
        exc: Raw exception from the provider call

    Returns:
        True for range-limit errors (by code or message)
    """
    if isinstance(exc, RangeTooLargeError):
        return True

    code, message = _extract_error_payload(exc)
    if code in RANGE_TOO_LARGE_ERROR_CODES:
        return True

    lowered = message.lower()
    return any(marker in lowered for marker in RANGE_TOO_LARGE_MARKERS)


def classify_rpc_error(exc: BaseException) -> BlockchainError:
    """
    Map a raw provider exception onto the blockchain error hierarchy.

    Args:
        exc: Raw exception

    Returns:
        RangeTooLargeError, or TransientRpcError for everything else
        (already classified errors are returned unchanged)
    """
    if isinstance(exc, BlockchainError):
        return exc

    _, message = _extract_error_payload(exc)
    if is_range_too_large(exc):
        return RangeTooLargeError(message)
    return TransientRpcError(f"{type(exc).__name__}: {message}")
