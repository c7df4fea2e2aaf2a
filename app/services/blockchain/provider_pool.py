"""
RPC Provider Pool - explicit provider failover state.

Owns the ordered list of interchangeable RPC endpoints and the index of
the one currently in use. Failover is an explicit transition on this
object; nothing else mutates it.
"""

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from loguru import logger as default_logger
from web3 import Web3

from app.config.constants import BLOCKCHAIN_RPC_TIMEOUT, BLOCKCHAIN_TIMEOUT

from .rpc_wrapper import (
    RangeTooLargeError,
    TransientRpcError,
    classify_rpc_error,
    with_timeout,
)

T = TypeVar("T")


class RpcProviderPool:
    """
    Execute operations against a list of providers with manual failover.

    Features:
    - Ordered providers (primary first)
    - Failover on transient errors, each provider tried at most once per call
    - Range-limit errors propagate without failover (the request is at fault)
    - Thread pool executor for sync Web3 calls

    Usage:
        pool = RpcProviderPool.from_urls(settings.get_rpc_urls())

        latest = await pool.execute(
            operation=lambda w3: w3.eth.block_number,
            operation_name="get_block_number",
        )
    """

    def __init__(
        self,
        providers: list[Any],
        names: list[str] | None = None,
        logger: Any = None,
        max_workers: int = 4,
        call_timeout: float = BLOCKCHAIN_TIMEOUT,
    ) -> None:
        """
        Initialize provider pool.

        Args:
            providers: Web3 instances (or any object the operations accept)
            names: Display names for logs, defaults to provider_<n>
            logger: Logger instance (defaults to loguru logger)
            max_workers: Thread pool size for sync operations
            call_timeout: Timeout for a single provider call
        """
        if not providers:
            raise ValueError("At least one provider must be specified")

        self.providers = providers
        self.names = names or [f"provider_{i}" for i in range(len(providers))]
        self.current_index = 0
        self.call_timeout = call_timeout
        self.logger = logger or default_logger

        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="rpc_pool"
        )

        # Track failover statistics
        self._failover_count = 0
        self._success_count = 0
        self._failure_count = 0

        self.logger.info(
            f"RpcProviderPool initialized with {len(providers)} providers"
        )

    @classmethod
    def from_urls(
        cls,
        urls: list[str],
        request_timeout: int = BLOCKCHAIN_RPC_TIMEOUT,
        **kwargs: Any,
    ) -> "RpcProviderPool":
        """
        Build a pool of HTTP Web3 providers.

        Args:
            urls: RPC endpoints in failover order
            request_timeout: HTTP timeout per request
        """
        providers = [
            Web3(
                Web3.HTTPProvider(
                    url, request_kwargs={"timeout": request_timeout}
                )
            )
            for url in urls
        ]
        names = [endpoint_name(url, i) for i, url in enumerate(urls)]
        return cls(providers, names=names, **kwargs)

    @property
    def current_provider(self) -> Any:
        """Currently active provider."""
        return self.providers[self.current_index]

    @property
    def current_name(self) -> str:
        """Display name of the active provider."""
        return self.names[self.current_index]

    def failover(self) -> bool:
        """
        Move to the next provider in order (wrapping around).

        Returns:
            True if the active provider changed
        """
        if len(self.providers) <= 1:
            return False

        old_name = self.current_name
        self.current_index = (self.current_index + 1) % len(self.providers)
        self._failover_count += 1
        self.logger.warning(
            f"RPC failover: {old_name} -> {self.current_name}"
        )
        return True

    def reset(self) -> None:
        """Return to the primary provider."""
        if self.current_index != 0:
            self.logger.info(f"Reset to primary provider: {self.names[0]}")
        self.current_index = 0

    async def execute(
        self,
        operation: Callable[[Any], T],
        operation_name: str,
    ) -> T:
        """
        Run a sync provider operation with failover.

        Starts at the active provider and tries each provider at most once.
        A provider that succeeds stays active for later calls.

        Args:
            operation: Function that takes a provider and returns a result
            operation_name: Human-readable operation name for logging

        Returns:
            Operation result

        Raises:
            RangeTooLargeError: Provider rejected the request size
            TransientRpcError: Every provider failed
        """
        last_error: Exception | None = None

        for attempt in range(len(self.providers)):
            if attempt > 0 and not self.failover():
                break

            provider = self.current_provider
            try:
                result = await with_timeout(
                    self._run_sync(operation, provider),
                    timeout=self.call_timeout,
                    operation_name=f"{operation_name} on {self.current_name}",
                )
            except Exception as e:
                error = classify_rpc_error(e)
                if isinstance(error, RangeTooLargeError):
                    raise error from e

                self._failure_count += 1
                last_error = error
                self.logger.warning(
                    f"[{operation_name}] Failed on provider "
                    f"{self.current_name}: {error}"
                )
                continue

            self._success_count += 1
            return result

        error_msg = (
            f"Operation '{operation_name}' failed on all "
            f"{len(self.providers)} providers. Last error: {last_error}"
        )
        self.logger.error(error_msg)
        raise TransientRpcError(error_msg) from last_error

    async def _run_sync(self, operation: Callable[[Any], T], provider: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, lambda: operation(provider)
        )

    def get_stats(self) -> dict[str, Any]:
        """
        Get failover statistics.

        Returns:
            Dict with success_count, failure_count, failover_count
        """
        return {
            "providers_count": len(self.providers),
            "current_provider": self.current_name,
            "success_count": self._success_count,
            "failure_count": self._failure_count,
            "failover_count": self._failover_count,
        }

    def close(self) -> None:
        """Shutdown thread pool executor."""
        self._executor.shutdown(wait=True)
        self.logger.debug("RpcProviderPool thread pool shut down")


def endpoint_name(url: str, index: int) -> str:
    """Host part of an endpoint URL (never the path, which may hold a key)."""
    host = url.split("://", 1)[-1].split("/", 1)[0]
    return host or f"provider_{index}"
