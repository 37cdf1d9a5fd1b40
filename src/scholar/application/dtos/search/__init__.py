"""Search DTOs."""

from scholar.application.dtos.search.search_dto import (
    GLOBAL_SEARCH_RESULT_ADAPTER,
    SEARCH_RESULT_ADAPTER,
    GlobalSearchResult,
    GlobalSearchSection,
    ProvenanceMeta,
    SearchResult,
)

__all__ = [
    "GLOBAL_SEARCH_RESULT_ADAPTER",
    "SEARCH_RESULT_ADAPTER",
    "GlobalSearchResult",
    "GlobalSearchSection",
    "ProvenanceMeta",
    "SearchResult",
]
