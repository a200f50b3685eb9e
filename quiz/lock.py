from __future__ import annotations

import asyncio
import contextlib
import logging
import time
import zlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis
from redis.exceptions import LockNotOwnedError
from redis.lock import Lock

logger = logging.getLogger(__name__)


class LockTimeout(RuntimeError):
    pass


class ShardedLocks:
    """In-process per-session mutual exclusion.

    Keys are spread over a fixed number of asyncio locks by a stable hash, so
    unrelated players rarely wait on each other and the lock table never grows.
    asyncio locks wake waiters in FIFO order, which keeps one player's
    messages in arrival order.
    """

    def __init__(self, shards: int = 64) -> None:
        if shards < 1:
            raise ValueError("shards must be >= 1")
        self._locks = [asyncio.Lock() for _ in range(shards)]

    def _lock_for(self, key: str) -> asyncio.Lock:
        return self._locks[zlib.crc32(key.encode("utf-8")) % len(self._locks)]

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        async with self._lock_for(key):
            yield


class RedisLocks:
    """Per-session lock shared by every replica that talks to the same Redis.

    Built on redis-py's `Lock` (token-checked, atomic Lua release). While the
    lock is held a background task re-arms its TTL every third of `ttl_ms`;
    `ttl_ms` only bounds how long a crashed holder keeps the session blocked.
    """

    def __init__(self, *, r: redis.Redis, ttl_ms: int = 5_000, wait_ms: int = 2_000, poll_ms: int = 20) -> None:
        self._r = r
        self._ttl_ms = ttl_ms
        self._wait_ms = wait_ms
        self._poll_ms = poll_ms

    async def _keep_alive(self, lock: Lock, key: str) -> None:
        while True:
            await asyncio.sleep(self._ttl_ms / 3000)
            try:
                lock.reacquire()
            except LockNotOwnedError:
                logger.warning("Lost session lock while holding it: %s", key)
                return

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._r.lock(f"quiz:lock:{key}", timeout=self._ttl_ms / 1000, thread_local=False)
        deadline = time.monotonic() + self._wait_ms / 1000

        # Non-blocking acquire: redis-py's blocking mode sleeps the whole thread.
        while not lock.acquire(blocking=False):
            if time.monotonic() >= deadline:
                raise LockTimeout(f"Session is busy: {key}")
            await asyncio.sleep(self._poll_ms / 1000)

        renew = asyncio.create_task(self._keep_alive(lock, key))
        try:
            yield
        finally:
            renew.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await renew
            try:
                lock.release()
            except LockNotOwnedError:
                logger.warning("Session lock expired before release: %s", key)
