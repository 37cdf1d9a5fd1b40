"""Cache-aside wrapper around expensive read computations.

Reads go to the cache first; on a miss the computation runs and its result
is written back with a TTL. The cache is best effort: any failure while
reading, writing or decoding is logged and treated as a miss.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, TypeVar
from urllib.parse import quote

from pydantic import TypeAdapter

from scholar.application.ports.cache import CacheStorePort

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return quote(str(value), safe="")


def build_cache_key(
    prefix: str,
    identifier: str | int,
    params: Mapping[str, Any] | None = None,
) -> str:
    """Build ``prefix:identifier|k1:v1|k2:v2`` with keys sorted.

    The identifier, parameter names and values are percent-encoded, so
    separators inside user text cannot imitate another request's key.
    Parameters that are None are left out so that "not given" and
    "explicitly null" share an entry.
    """
    key = f"{prefix}:{_format_value(identifier)}"
    if params:
        parts = [
            f"{quote(name, safe='')}:{_format_value(value)}"
            for name, value in sorted(params.items())
            if value is not None
        ]
        if parts:
            key = key + "|" + "|".join(parts)
    return key


class CacheAsideService:
    """Serve results from the cache, computing and storing them on a miss."""

    def __init__(self, store: CacheStorePort):
        self._store = store

    async def get_or_compute(
        self,
        key: str,
        ttl_seconds: int | Callable[[T], int],
        compute: Callable[[], Awaitable[T]],
        adapter: TypeAdapter[T],
        should_cache: Callable[[T], bool] | None = None,
    ) -> T:
        cached = await self._read(key, adapter)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return cached[0]

        logger.debug("Cache miss: %s", key)
        result = await compute()

        if should_cache is not None and not should_cache(result):
            logger.debug("Result for %s not cached", key)
            return result

        ttl = ttl_seconds(result) if callable(ttl_seconds) else ttl_seconds
        await self._write(key, result, ttl, adapter)
        return result

    async def _read(self, key: str, adapter: TypeAdapter[T]) -> tuple[T] | None:
        # A 1-tuple keeps a cached None distinguishable from a miss
        try:
            raw = await self._store.get(key)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return (adapter.validate_json(raw),)
        except Exception as e:
            logger.warning(
                "Discarding undecodable cache entry %s (%s)",
                key,
                type(e).__name__,
            )
            return None

    async def _write(
        self,
        key: str,
        value: T,
        ttl_seconds: int,
        adapter: TypeAdapter[T],
    ) -> None:
        try:
            payload = adapter.dump_json(value)
        except Exception as e:
            logger.warning("Could not serialize result for %s: %s", key, e)
            return
        try:
            await self._store.set(key, payload, ttl_seconds)
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)
