"""Search works and persons side by side."""

from __future__ import annotations

import asyncio
import time
from typing import Any

from scholar.application.dtos.search import (
    GLOBAL_SEARCH_RESULT_ADAPTER,
    GlobalSearchResult,
    GlobalSearchSection,
    SearchResult,
)
from scholar.application.queries.search.search_entities_query import (
    SearchPersonsQuery,
    SearchWorksQuery,
)
from scholar.application.services.cache import CacheAsideService, build_cache_key
from scholar.domain.search import EntityKind, SearchRequest
from scholar.domain.shared.value_objects import Pagination

DEFAULT_GLOBAL_LIMIT = 5


def _section(result: SearchResult, limit: int) -> GlobalSearchSection:
    return GlobalSearchSection(
        total=result.total,
        results=result.items[:limit],
        provenance=result.provenance,
    )


class GlobalSearchQuery:
    """Run the works and persons searches concurrently with a small limit."""

    def __init__(
        self,
        works_query: SearchWorksQuery,
        persons_query: SearchPersonsQuery,
        cache: CacheAsideService,
        ttl_seconds: int = 300,
    ):
        self._works = works_query
        self._persons = persons_query
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    async def execute(self, query: Any, limit: Any = DEFAULT_GLOBAL_LIMIT) -> GlobalSearchResult:
        # Validate once up front so both sections fail the same way
        request = SearchRequest.create(query, EntityKind.WORK)
        window = Pagination.normalize(1, limit)
        key = build_cache_key("search:global", request.query, {"limit": window.limit})

        async def compute() -> GlobalSearchResult:
            started = time.perf_counter()
            works, persons = await asyncio.gather(
                self._works.execute(request.query, page=1, limit=window.limit),
                self._persons.execute(request.query, page=1, limit=window.limit),
            )
            return GlobalSearchResult(
                query=request.query,
                works=_section(works, window.limit),
                persons=_section(persons, window.limit),
                meta={"query_time_ms": int((time.perf_counter() - started) * 1000)},
            )

        return await self._cache.get_or_compute(
            key,
            self._ttl_seconds,
            compute,
            GLOBAL_SEARCH_RESULT_ADAPTER,
            should_cache=lambda r: not (
                r.works.provenance.degraded or r.persons.provenance.degraded
            ),
        )
