"""In-process cache store used when Redis is disabled."""

from __future__ import annotations

import time

from scholar.application.ports.cache import CacheStorePort

DEFAULT_MAX_ENTRIES = 1000


class InMemoryCacheStore(CacheStorePort):
    """Dict with monotonic-clock expiry and oldest-first eviction."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        self._entries: dict[str, tuple[float, bytes]] = {}
        self._max_entries = max_entries

    async def get(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        if key not in self._entries and len(self._entries) >= self._max_entries:
            self._entries.pop(next(iter(self._entries)))
        self._entries[key] = (time.monotonic() + ttl_seconds, value)

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._entries)
