"""Redis async client used by the distributed ride locks."""

import redis.asyncio as aioredis

from ridesapp.config import Settings
from ridesapp.infrastructure.locks import (
    LocalRideLocks,
    RedisRideLocks,
    RideLockRegistry,
)


def create_redis(settings: Settings) -> aioredis.Redis:
    """Return a Redis client backed by its own connection pool."""
    pool = aioredis.ConnectionPool.from_url(
        settings.redis_url, decode_responses=True
    )
    return aioredis.Redis(connection_pool=pool)


def build_ride_locks(
    settings: Settings, client: aioredis.Redis | None = None
) -> RideLockRegistry:
    """Pick the lock registry named by ``booking_lock_backend``."""
    if settings.booking_lock_backend == "redis":
        return RedisRideLocks(
            client or create_redis(settings),
            ttl_seconds=settings.booking_lock_ttl_seconds,
            timeout_seconds=settings.booking_lock_timeout_seconds,
        )
    return LocalRideLocks()
