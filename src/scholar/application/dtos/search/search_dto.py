"""Search result DTOs.

Items are plain JSON-safe dicts so that a result served from the cache is
indistinguishable from a freshly computed one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter

from scholar.domain.search import SearchEngine
from scholar.domain.shared.value_objects import PaginationMeta


@dataclass
class ProvenanceMeta:
    """Which backends answered and how long each phase took."""

    engine: SearchEngine
    query_type: str
    timings: dict[str, int | None] = field(default_factory=dict)
    degraded: bool = False
    approximate_total: bool = False


@dataclass
class SearchResult:
    """One page of search results for a single entity kind."""

    items: list[dict[str, Any]]
    total: int
    pagination: PaginationMeta
    provenance: ProvenanceMeta
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return SEARCH_RESULT_ADAPTER.dump_python(self, mode="json")


@dataclass
class GlobalSearchSection:
    total: int
    results: list[dict[str, Any]]
    provenance: ProvenanceMeta


@dataclass
class GlobalSearchResult:
    """Works and persons searched side by side with a small limit."""

    query: str
    works: GlobalSearchSection
    persons: GlobalSearchSection
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return GLOBAL_SEARCH_RESULT_ADAPTER.dump_python(self, mode="json")


SEARCH_RESULT_ADAPTER: TypeAdapter[SearchResult] = TypeAdapter(SearchResult)
GLOBAL_SEARCH_RESULT_ADAPTER: TypeAdapter[GlobalSearchResult] = TypeAdapter(
    GlobalSearchResult,
)
