"""Dependency wiring for the caller-facing queries.

Each getter builds its object once per process from application settings.
Call ``shutdown()`` before the event loop closes to release the pool, the
index client and the cache connection.
"""

import logging
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from scholar.application.ports.cache import CacheStorePort
from scholar.application.queries import (
    GetVenueEnrichedQuery,
    GlobalSearchQuery,
    ListVenuesEnrichedQuery,
    SearchPersonsQuery,
    SearchWorksQuery,
)
from scholar.application.services import CacheAsideService, SearchOrchestrator
from scholar.domain.search import EntityKind
from scholar.infrastructure.cache import (
    InMemoryCacheStore,
    RedisCacheStore,
    RedisConnectionManager,
)
from scholar.infrastructure.integration.search_index import (
    SearchIndexAdapter,
    SearchIndexClient,
)
from scholar.infrastructure.persistence.sqlalchemy.adapters import (
    SqlAlchemyPersonStoreAdapter,
    SqlAlchemyVenueReadAdapter,
    SqlAlchemyWorkStoreAdapter,
)
from scholar.infrastructure.persistence.sqlalchemy.query_executor import (
    DeadlineQueryExecutor,
)
from scholar_config.settings import get_settings

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Relational store
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Get the shared async database engine (singleton)."""
    settings = get_settings()
    url = settings.database_url
    kwargs = {}
    if not url.startswith("sqlite"):
        kwargs["pool_size"] = settings.db_pool_size
    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before use
        **kwargs,
    )


@lru_cache(maxsize=1)
def get_query_executor() -> DeadlineQueryExecutor:
    return DeadlineQueryExecutor(
        get_engine(),
        default_timeout_ms=get_settings().db_point_timeout_ms,
    )


# -----------------------------------------------------------------------------
# Cache
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_cache_store() -> CacheStorePort:
    settings = get_settings()
    if not settings.redis_enabled:
        logger.info("Redis disabled, using in-process cache")
        return InMemoryCacheStore()
    return RedisCacheStore(
        RedisConnectionManager(
            settings.redis_url,
            connect_timeout=settings.redis_connect_timeout,
        ),
        fallback=InMemoryCacheStore(),
    )


@lru_cache(maxsize=1)
def get_cache_service() -> CacheAsideService:
    return CacheAsideService(get_cache_store())


# -----------------------------------------------------------------------------
# Full-text index
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_index_client() -> SearchIndexClient:
    settings = get_settings()
    return SearchIndexClient(
        settings.index_url,
        connect_timeout=settings.index_connect_timeout,
        query_timeout_ms=settings.index_query_timeout_ms,
    )


@lru_cache(maxsize=1)
def get_index_adapter() -> SearchIndexAdapter:
    settings = get_settings()
    return SearchIndexAdapter(
        get_index_client(),
        tables={
            EntityKind.WORK: settings.index_works_table,
            EntityKind.PERSON: settings.index_persons_table,
        },
        enabled=settings.index_enabled,
        retry_backoff_seconds=settings.index_retry_backoff_seconds,
        max_matches=settings.index_max_matches,
    )


# -----------------------------------------------------------------------------
# Search
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_search_orchestrator() -> SearchOrchestrator:
    settings = get_settings()
    executor = get_query_executor()
    timeouts = {
        "hydrate_timeout_ms": settings.db_hydrate_timeout_ms,
        "fallback_timeout_ms": settings.db_fallback_timeout_ms,
    }
    return SearchOrchestrator(
        get_index_adapter(),
        {
            EntityKind.WORK: SqlAlchemyWorkStoreAdapter(executor, **timeouts),
            EntityKind.PERSON: SqlAlchemyPersonStoreAdapter(executor, **timeouts),
        },
    )


@lru_cache(maxsize=1)
def get_search_works_query() -> SearchWorksQuery:
    return SearchWorksQuery(
        get_search_orchestrator(),
        get_cache_service(),
        ttl_seconds=get_settings().cache_ttl_search,
    )


@lru_cache(maxsize=1)
def get_search_persons_query() -> SearchPersonsQuery:
    settings = get_settings()
    return SearchPersonsQuery(
        get_search_orchestrator(),
        get_cache_service(),
        ttl_seconds=settings.cache_ttl_search,
        index_ttl_seconds=settings.cache_ttl_index_search,
    )


@lru_cache(maxsize=1)
def get_global_search_query() -> GlobalSearchQuery:
    return GlobalSearchQuery(
        get_search_works_query(),
        get_search_persons_query(),
        get_cache_service(),
        ttl_seconds=get_settings().cache_ttl_search,
    )


# -----------------------------------------------------------------------------
# Venues
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_venue_read_adapter() -> SqlAlchemyVenueReadAdapter:
    settings = get_settings()
    return SqlAlchemyVenueReadAdapter(
        get_query_executor(),
        aggregate_timeout_ms=settings.db_aggregate_timeout_ms,
        point_timeout_ms=settings.db_point_timeout_ms,
    )


@lru_cache(maxsize=1)
def get_venue_enriched_query() -> GetVenueEnrichedQuery:
    return GetVenueEnrichedQuery(
        get_venue_read_adapter(),
        get_cache_service(),
        ttl_seconds=get_settings().cache_ttl_venue_detail,
    )


@lru_cache(maxsize=1)
def get_list_venues_query() -> ListVenuesEnrichedQuery:
    return ListVenuesEnrichedQuery(
        get_venue_read_adapter(),
        get_cache_service(),
        ttl_seconds=get_settings().cache_ttl_venue_list,
    )


# -----------------------------------------------------------------------------
# Lifecycle
# -----------------------------------------------------------------------------

_GETTERS = (
    get_engine,
    get_query_executor,
    get_cache_store,
    get_cache_service,
    get_index_client,
    get_index_adapter,
    get_search_orchestrator,
    get_search_works_query,
    get_search_persons_query,
    get_global_search_query,
    get_venue_read_adapter,
    get_venue_enriched_query,
    get_list_venues_query,
)


async def shutdown() -> None:
    """Release pooled resources and forget the singletons."""
    if get_index_client.cache_info().currsize:
        await get_index_client().close()
    if get_cache_store.cache_info().currsize:
        await get_cache_store().close()
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    for getter in _GETTERS:
        getter.cache_clear()
