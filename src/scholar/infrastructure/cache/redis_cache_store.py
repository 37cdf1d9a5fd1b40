"""Redis-backed cache store."""

from __future__ import annotations

import logging

from redis.exceptions import RedisError

from scholar.application.ports.cache import CacheStorePort
from scholar.infrastructure.cache.redis_connection import RedisConnectionManager

logger = logging.getLogger(__name__)


class RedisCacheStore(CacheStorePort):
    """Cache store over ``SETEX``/``GET``.

    While Redis is down, reads and writes go to the optional local
    ``fallback`` store; without one every read is a miss and every write a
    no-op.
    """

    def __init__(
        self,
        connection: RedisConnectionManager,
        namespace: str = "scholar",
        fallback: CacheStorePort | None = None,
    ):
        self._connection = connection
        self._namespace = namespace
        self._fallback = fallback

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def get(self, key: str) -> bytes | None:
        client = await self._connection.get_client()
        if client is not None:
            try:
                return await client.get(self._key(key))
            except (RedisError, OSError) as e:
                logger.warning("Redis get failed: %s", e)
                await self._connection.mark_failed()
        if self._fallback is not None:
            return await self._fallback.get(key)
        return None

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        client = await self._connection.get_client()
        if client is not None:
            try:
                await client.setex(self._key(key), max(1, int(ttl_seconds)), value)
                return
            except (RedisError, OSError) as e:
                logger.warning("Redis set failed: %s", e)
                await self._connection.mark_failed()
        if self._fallback is not None:
            await self._fallback.set(key, value, ttl_seconds)

    async def ping(self) -> bool:
        return await self._connection.get_client() is not None

    async def close(self) -> None:
        await self._connection.close()
