"""Cache store implementations."""

from scholar.infrastructure.cache.memory_cache_store import InMemoryCacheStore
from scholar.infrastructure.cache.redis_cache_store import RedisCacheStore
from scholar.infrastructure.cache.redis_connection import RedisConnectionManager

__all__ = ["InMemoryCacheStore", "RedisCacheStore", "RedisConnectionManager"]
