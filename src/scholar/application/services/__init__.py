"""Application services."""

from scholar.application.services.cache import CacheAsideService, build_cache_key
from scholar.application.services.search import SearchOrchestrator

__all__ = ["CacheAsideService", "SearchOrchestrator", "build_cache_key"]
