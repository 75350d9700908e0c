"""
Redis connection and JSON draft cache
Backs best-effort client drafts; never a source of truth
"""

import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from .config import (
    REDIS_CONNECT_TIMEOUT,
    REDIS_DB,
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    REDIS_RETRY_SECONDS,
    REDIS_SSL,
    REDIS_URL,
)

logger = logging.getLogger(__name__)

# Redis connection
redis_client: Optional[aioredis.Redis] = None


def _mask_url(redis_url: str) -> str:
    if "@" in redis_url:
        protocol = redis_url.split(":")[0]
        return f"{protocol}://****@{redis_url.split('@', 1)[1]}"
    return redis_url


async def get_redis_client() -> aioredis.Redis:
    """
    Get or create the shared asyncio Redis client.

    Uses REDIS_URL when set, otherwise REDIS_HOST/REDIS_PORT. The first call
    pings the server, so an unreachable Redis raises here.
    """
    global redis_client

    if redis_client is None:
        options = dict(
            decode_responses=True,
            socket_connect_timeout=REDIS_CONNECT_TIMEOUT,
            socket_timeout=REDIS_CONNECT_TIMEOUT,
        )
        if REDIS_URL:
            logger.info(f"📡 Connecting to Redis at {_mask_url(REDIS_URL)}")
            client = aioredis.from_url(REDIS_URL, **options)
        else:
            logger.info(f"📡 Connecting to Redis at {REDIS_HOST}:{REDIS_PORT}/{REDIS_DB} (SSL: {REDIS_SSL})")
            client = aioredis.Redis(
                host=REDIS_HOST,
                port=REDIS_PORT,
                password=REDIS_PASSWORD,
                db=REDIS_DB,
                ssl=REDIS_SSL,
                **options,
            )

        try:
            await client.ping()
        except (RedisError, OSError):
            await client.aclose()
            raise
        logger.info("Redis connected successfully")
        redis_client = client

    return redis_client


async def close_redis_client() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None


class Cache:
    """
    JSON values in Redis that fail open.

    Every error is logged and reported as a miss. After a connection failure
    Redis is left alone for retry_after seconds, so an outage costs one
    connect timeout per window instead of one per request.
    """

    def __init__(
        self,
        client: Optional[aioredis.Redis] = None,
        connect: Callable[[], Awaitable[aioredis.Redis]] = get_redis_client,
        retry_after: float = REDIS_RETRY_SECONDS,
    ):
        self.client = client
        self.connect = connect
        self.retry_after = retry_after
        self._down_until = 0.0

    @property
    def available(self) -> bool:
        return time.monotonic() >= self._down_until

    def _mark_down(self, error: Exception) -> None:
        if self.available:
            logger.warning(f"⚠️ Redis unavailable, drafts not cached for {self.retry_after:.0f}s: {error}")
        self._down_until = time.monotonic() + self.retry_after

    async def _client(self) -> Optional[aioredis.Redis]:
        if not self.available:
            return None
        if self.client is None:
            try:
                self.client = await self.connect()
            except (RedisError, OSError) as e:
                self._mark_down(e)
                return None
        return self.client

    async def get(self, key: str) -> Optional[Any]:
        client = await self._client()
        if client is None:
            return None
        try:
            value = await client.get(key)
        except (RedisError, OSError) as e:
            self._mark_down(e)
            return None
        if not value:
            return None
        try:
            return json.loads(value)
        except ValueError:
            logger.error(f"❌ Cached value for {key} is not JSON, dropping it")
            await self.delete(key)
            return None

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        client = await self._client()
        if client is None:
            return False
        try:
            await client.setex(key, ttl, json.dumps(value))
        except (RedisError, OSError) as e:
            self._mark_down(e)
            return False
        return True

    async def delete(self, key: str) -> bool:
        client = await self._client()
        if client is None:
            return False
        try:
            await client.delete(key)
        except (RedisError, OSError) as e:
            self._mark_down(e)
            return False
        return True


# Global cache instance
cache = Cache()
