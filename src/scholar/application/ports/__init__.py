"""Application layer ports (aka interfaces)."""

from scholar.application.ports.cache import CacheStorePort
from scholar.application.ports.search import (
    EntityStorePort,
    FullTextIndexPort,
    IndexHits,
)
from scholar.application.ports.venues import VenueReadPort

__all__ = [
    "CacheStorePort",
    "EntityStorePort",
    "FullTextIndexPort",
    "IndexHits",
    "VenueReadPort",
]
