"""Lazy Redis connection owner.

The cache stores never hold a client directly; they ask the manager for one
and report failures back so the next call reconnects.
"""

from __future__ import annotations

import asyncio
import logging
import time

import redis.asyncio as redis_async
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisConnectionManager:
    """Create, check and drop the shared Redis client."""

    def __init__(
        self,
        url: str,
        connect_timeout: float = 10.0,
        retry_interval_seconds: float = 30.0,
    ):
        self._url = url
        self._connect_timeout = connect_timeout
        self._retry_interval_seconds = retry_interval_seconds
        self._client: redis_async.Redis | None = None
        self._next_attempt = 0.0
        self._connect_lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def get_client(self) -> redis_async.Redis | None:
        """Return a live client or None while Redis is unreachable."""
        if self._client is not None:
            return self._client
        # one connect attempt at a time; waiters reuse its outcome
        async with self._connect_lock:
            if self._client is not None:
                return self._client
            if time.monotonic() < self._next_attempt:
                return None
            return await self._connect()

    async def _connect(self) -> redis_async.Redis | None:
        client = redis_async.from_url(
            self._url,
            socket_connect_timeout=self._connect_timeout,
            socket_timeout=self._connect_timeout,
        )
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            logger.warning("Redis unavailable at %s: %s", self._safe_url, e)
            self._next_attempt = time.monotonic() + self._retry_interval_seconds
            await client.aclose()
            return None

        logger.info("Redis connected at %s", self._safe_url)
        self._client = client
        return client

    async def mark_failed(self) -> None:
        """Drop the current client after an operation failed on it."""
        client, self._client = self._client, None
        self._next_attempt = time.monotonic() + self._retry_interval_seconds
        if client is not None:
            try:
                await client.aclose()
            except (RedisError, OSError) as e:
                logger.debug("Ignoring error while closing Redis client: %s", e)

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    @property
    def _safe_url(self) -> str:
        # Hide credentials in logs
        return self._url.rsplit("@", 1)[-1]
