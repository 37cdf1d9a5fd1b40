from scholar.application.services.cache.cache_aside_service import (
    CacheAsideService,
    build_cache_key,
)

__all__ = ["CacheAsideService", "build_cache_key"]
