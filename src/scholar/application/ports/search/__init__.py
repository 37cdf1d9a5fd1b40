from scholar.application.ports.search.search_ports import (
    EntityStorePort,
    FullTextIndexPort,
    IndexHits,
)

__all__ = ["EntityStorePort", "FullTextIndexPort", "IndexHits"]
