"""Search works or persons through the cache and the orchestrator."""

from __future__ import annotations

from typing import Any, ClassVar

from scholar.application.dtos.search import SEARCH_RESULT_ADAPTER, SearchResult
from scholar.application.services.cache import CacheAsideService, build_cache_key
from scholar.application.services.search import SearchOrchestrator
from scholar.domain.search import EntityKind, SearchEngine, SearchRequest
from scholar.domain.shared.value_objects import Pagination


def _is_complete(result: SearchResult) -> bool:
    return not result.provenance.degraded


class _EntitySearchQuery:
    entity_kind: ClassVar[EntityKind]
    cache_prefix: ClassVar[str]

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        cache: CacheAsideService,
        ttl_seconds: int = 300,
    ):
        self._orchestrator = orchestrator
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _ttl_for(self, result: SearchResult) -> int:
        return self._ttl_seconds

    async def execute(
        self,
        query: Any,
        filters: dict[str, Any] | None = None,
        page: Any = None,
        limit: Any = None,
        offset: Any = None,
    ) -> SearchResult:
        request = SearchRequest.create(query, self.entity_kind, filters)
        window = Pagination.normalize(page, limit, offset)
        key = build_cache_key(
            self.cache_prefix,
            request.query,
            {**request.filters, "page": window.page, "limit": window.limit},
        )
        return await self._cache.get_or_compute(
            key,
            self._ttl_for,
            lambda: self._orchestrator.search(request, window),
            SEARCH_RESULT_ADAPTER,
            should_cache=_is_complete,
        )


class SearchWorksQuery(_EntitySearchQuery):
    """Full-text search over works."""

    entity_kind = EntityKind.WORK
    cache_prefix = "search:works"


class SearchPersonsQuery(_EntitySearchQuery):
    """Full-text search over persons.

    Index-backed person results change rarely and are kept longer than
    store fallback results.
    """

    entity_kind = EntityKind.PERSON
    cache_prefix = "search:persons"

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        cache: CacheAsideService,
        ttl_seconds: int = 300,
        index_ttl_seconds: int = 3600,
    ):
        super().__init__(orchestrator, cache, ttl_seconds)
        self._index_ttl_seconds = index_ttl_seconds

    def _ttl_for(self, result: SearchResult) -> int:
        if result.provenance.engine is SearchEngine.INDEX_PLUS_STORE:
            return self._index_ttl_seconds
        return self._ttl_seconds
