"""Cache store port.

The cache only ever sees opaque bytes; serialization belongs to the
cache-aside service. Connection lifecycle is owned by the implementation.
"""

from abc import ABC, abstractmethod


class CacheStorePort(ABC):
    """Key/value store with per-entry TTL."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the stored value or None on a miss."""

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True when the backing store is reachable."""

    async def close(self) -> None:  # NOQA: B027
        return None
