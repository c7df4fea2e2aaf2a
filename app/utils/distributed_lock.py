"""
Distributed lock.

Serializes critical sections (deposit confirmation per user) across
workers via Redis, or within one process via asyncio locks when Redis
is disabled.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import LockError, RedisError

from app.config.constants import (
    DISTRIBUTED_LOCK_BLOCKING_TIMEOUT,
    DISTRIBUTED_LOCK_TIMEOUT,
)


class DistributedLock:
    """
    Named lock with a Redis backend and an in-process fallback.

    Usage:
        async with lock.lock("deposit_confirm:42") as acquired:
            if not acquired:
                return
            ...
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        self.redis_client = redis_client
        self._local_locks: dict[str, asyncio.Lock] = {}
        self._local_refs: dict[str, int] = {}

    def _local_lock(self, key: str) -> asyncio.Lock:
        lock = self._local_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._local_locks[key] = lock
        return lock

    @asynccontextmanager
    async def lock(
        self,
        key: str,
        timeout: int = DISTRIBUTED_LOCK_TIMEOUT,
        blocking: bool = True,
        blocking_timeout: float = DISTRIBUTED_LOCK_BLOCKING_TIMEOUT,
    ) -> AsyncIterator[bool]:
        """
        Acquire the named lock for the duration of the block.

        Args:
            key: Lock name
            timeout: Lock TTL in seconds (Redis only)
            blocking: Wait for the lock instead of failing fast
            blocking_timeout: Maximum wait when blocking

        Yields:
            True if the lock is held, False if it could not be acquired
        """
        if self.redis_client is None:
            async with self._local_section(key, blocking, blocking_timeout) as acquired:
                yield acquired
            return

        redis_lock = self.redis_client.lock(
            f"lock:{key}",
            timeout=timeout,
            blocking=blocking,
            blocking_timeout=blocking_timeout if blocking else None,
        )
        try:
            acquired = await redis_lock.acquire()
        except RedisError as e:
            logger.error(f"Redis lock acquisition failed for {key}: {e}")
            raise

        if not acquired:
            logger.warning(f"Lock {key} is held elsewhere")
            yield False
            return

        try:
            yield True
        finally:
            try:
                await redis_lock.release()
            except LockError as e:
                # TTL expired before release
                logger.warning(f"Lock {key} was already released: {e}")

    @asynccontextmanager
    async def _local_section(
        self, key: str, blocking: bool, blocking_timeout: float
    ) -> AsyncIterator[bool]:
        lock = self._local_lock(key)
        self._local_refs[key] = self._local_refs.get(key, 0) + 1
        try:
            if not blocking and lock.locked():
                yield False
                return

            try:
                await asyncio.wait_for(lock.acquire(), timeout=blocking_timeout)
            except TimeoutError:
                logger.warning(f"Timed out waiting for local lock {key}")
                yield False
                return

            try:
                yield True
            finally:
                lock.release()
        finally:
            self._forget_local(key)

    def _forget_local(self, key: str) -> None:
        """Drop the key's lock once nobody holds or waits for it."""
        refs = self._local_refs.get(key, 0) - 1
        if refs > 0:
            self._local_refs[key] = refs
            return
        self._local_refs.pop(key, None)
        self._local_locks.pop(key, None)


_distributed_lock: DistributedLock | None = None


def get_distributed_lock(redis_client: redis.Redis | None = None) -> DistributedLock:
    """
    Get the process-wide lock instance.

    The first call decides the backend: pass a Redis client to share locks
    between workers.
    """
    global _distributed_lock
    if _distributed_lock is None:
        _distributed_lock = DistributedLock(redis_client=redis_client)
    return _distributed_lock
