from scholar.application.ports.cache.cache_store_port import CacheStorePort

__all__ = ["CacheStorePort"]
