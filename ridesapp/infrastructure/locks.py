"""
Ride-scoped locks for the seat-booking read-modify-write.

Two registries share one interface (``hold(ride_id)``):

* ``LocalRideLocks``  -- one ``asyncio.Lock`` per ride id, per process.
  Enough for a single API process and for stores without row locks
  (SQLite).
* ``RedisRideLocks``  -- a ``DistributedLock`` per ride id, so several API
  processes serialise on the same ride.

Both sit in front of the ``SELECT ... FOR UPDATE`` the repositories issue.

``DistributedLock`` uses SET NX EX for acquire and a Lua script for
atomic check-and-delete on release.
"""

from __future__ import annotations

import asyncio
import uuid
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis


class LockNotAcquired(RuntimeError):
    """The lock could not be taken before the timeout expired."""


class DistributedLock:
    POLL_INTERVAL = 0.02

    def __init__(
        self, client: aioredis.Redis, key: str, ttl_seconds: int = 30
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.token = str(uuid.uuid4())

    async def acquire(self, blocking_timeout: float | None = None) -> bool:
        """Try to acquire. Returns True on success.

        Without *blocking_timeout* this is a single attempt; with it the
        lock is polled until the timeout runs out.
        """
        loop = asyncio.get_running_loop()
        deadline = None if blocking_timeout is None else loop.time() + blocking_timeout
        while True:
            if await self.redis.set(self.key, self.token, nx=True, ex=self.ttl):
                return True
            if deadline is None or loop.time() >= deadline:
                return False
            await asyncio.sleep(self.POLL_INTERVAL)

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        lua = """
        if redis.call("get", KEYS[1]) == ARGV[1] then
            return redis.call("del", KEYS[1])
        else
            return 0
        end
        """
        await self.redis.eval(lua, 1, self.key, self.token)

    # context-manager support
    async def __aenter__(self):
        acquired = await self.acquire()
        if not acquired:
            raise LockNotAcquired(f"Could not acquire lock: {self.key}")
        return self

    async def __aexit__(self, *args):
        await self.release()


class RideLockRegistry(ABC):
    @abstractmethod
    def hold(self, ride_id: int) -> AsyncIterator[None]:
        """Async context manager that holds the lock for *ride_id*."""


class LocalRideLocks(RideLockRegistry):
    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, ride_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(ride_id, asyncio.Lock())
        self._users[ride_id] = self._users.get(ride_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[ride_id] -= 1
            if not self._users[ride_id]:
                del self._users[ride_id]
                del self._locks[ride_id]


class RedisRideLocks(RideLockRegistry):
    def __init__(
        self,
        client: aioredis.Redis,
        ttl_seconds: int = 10,
        timeout_seconds: float = 5.0,
    ):
        self.redis = client
        self.ttl = ttl_seconds
        self.timeout = timeout_seconds

    @asynccontextmanager
    async def hold(self, ride_id: int) -> AsyncIterator[None]:
        lock = DistributedLock(self.redis, f"ride:{ride_id}", ttl_seconds=self.ttl)
        if not await lock.acquire(blocking_timeout=self.timeout):
            raise LockNotAcquired(f"Could not acquire lock: {lock.key}")
        try:
            yield
        finally:
            await lock.release()
