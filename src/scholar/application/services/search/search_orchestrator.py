"""Search-then-hydrate over the full-text index and the relational store.

The index returns ranked ids; the store supplies the records. The result
always keeps index rank order on the index path and id-descending order on
the store fallback. Index failures never reach the caller: the store's own
substring search takes over, flagged through ``provenance``.

Flow::

    INDEX_LOOKUP --ids--> HYDRATE ------------------------> DONE
         |                   | (timeout, once)
         +--unavailable------+--> FALLBACK_STORE_SEARCH --> DONE
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from scholar.application.dtos.search import ProvenanceMeta, SearchResult
from scholar.application.ports.search import EntityStorePort, FullTextIndexPort
from scholar.domain.search import (
    EntityKind,
    IndexUnavailable,
    QueryTimeout,
    SearchEngine,
    SearchRequest,
)
from scholar.domain.shared.value_objects import Pagination, PaginationMeta

logger = logging.getLogger(__name__)

QUERY_TYPE_HYDRATE = "search_hydrate"
QUERY_TYPE_FALLBACK = "search_fallback"
QUERY_TYPE_SHORT = "short_query"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class SearchOrchestrator:
    """Coordinate one search across the index and an entity store."""

    def __init__(
        self,
        index: FullTextIndexPort,
        stores: dict[EntityKind, EntityStorePort],
    ):
        self._index = index
        self._stores = stores

    async def search(self, request: SearchRequest, window: Pagination) -> SearchResult:
        store = self._stores[request.entity_kind]
        started = time.perf_counter()
        timings: dict[str, int | None] = {"index_ms": None}

        if not request.uses_index:
            return await self._fallback(
                store,
                request,
                window,
                timings,
                started,
                query_type=QUERY_TYPE_SHORT,
            )

        index_started = time.perf_counter()
        try:
            hits = await self._index.search_ids(
                request.entity_kind,
                request.query,
                request.filters,
                window.limit,
                window.offset,
            )
        except IndexUnavailable as e:
            timings["index_ms"] = _elapsed_ms(index_started)
            logger.warning(
                "Index lookup failed for %s search, using store fallback: %s",
                request.entity_kind.value,
                e,
            )
            return await self._fallback(store, request, window, timings, started)
        timings["index_ms"] = hits.query_time_ms
        timings["index_roundtrip_ms"] = _elapsed_ms(index_started)

        ids = hits.ids[: window.limit]
        if not ids:
            timings["total_ms"] = _elapsed_ms(started)
            return SearchResult(
                items=[],
                total=hits.total,
                pagination=PaginationMeta.for_window(window, hits.total),
                provenance=ProvenanceMeta(
                    engine=SearchEngine.INDEX_PLUS_STORE,
                    query_type=QUERY_TYPE_HYDRATE,
                    timings=timings,
                ),
                meta={"query": request.query, "hydrated": 0},
            )

        try:
            items, missing = await self._hydrate(store, ids, timings)
        except QueryTimeout as e:
            logger.warning(
                "Hydration of %d %s ids timed out, retrying via store fallback: %s",
                len(ids),
                request.entity_kind.value,
                e,
            )
            return await self._fallback(store, request, window, timings, started)

        meta: dict[str, Any] = {"query": request.query, "hydrated": len(items)}
        if missing:
            meta["missing_ids"] = missing
        timings["total_ms"] = _elapsed_ms(started)
        return SearchResult(
            items=items,
            total=hits.total,
            pagination=PaginationMeta.for_window(window, hits.total),
            provenance=ProvenanceMeta(
                engine=SearchEngine.INDEX_PLUS_STORE,
                query_type=QUERY_TYPE_HYDRATE,
                timings=timings,
            ),
            meta=meta,
        )

    async def _hydrate(
        self,
        store: EntityStorePort,
        ids: list[int],
        timings: dict[str, int | None],
    ) -> tuple[list[dict[str, Any]], list[int]]:
        """Fetch rows and snapshot concurrently, then restore index order."""

        async def timed(coro, name: str):
            phase_started = time.perf_counter()
            try:
                return await coro
            finally:
                timings[name] = _elapsed_ms(phase_started)

        rows, snapshot = await asyncio.gather(
            timed(store.hydrate(ids), "hydrate_ms"),
            timed(store.fetch_snapshot(ids), "snapshot_ms"),
        )

        rows_by_id = {int(row["id"]): row for row in rows}
        items: list[dict[str, Any]] = []
        missing: list[int] = []
        for entity_id in ids:
            row = rows_by_id.get(entity_id)
            if row is None:
                missing.append(entity_id)
                continue
            items.append(store.shape(row, snapshot.get(entity_id)))

        if missing:
            logger.info("Index returned %d ids unknown to the store", len(missing))
        return items, missing

    async def _fallback(
        self,
        store: EntityStorePort,
        request: SearchRequest,
        window: Pagination,
        timings: dict[str, int | None],
        started: float,
        query_type: str = QUERY_TYPE_FALLBACK,
    ) -> SearchResult:
        fallback_started = time.perf_counter()
        try:
            rows = await store.substring_search(
                request.query,
                request.filters,
                window.limit,
                window.offset,
            )
        except QueryTimeout as e:
            timings["fallback_ms"] = _elapsed_ms(fallback_started)
            timings["total_ms"] = _elapsed_ms(started)
            logger.warning(
                "Store fallback for %s search timed out, returning degraded result: %s",
                request.entity_kind.value,
                e,
            )
            return SearchResult(
                items=[],
                total=window.offset,
                pagination=PaginationMeta.for_window(window, window.offset),
                provenance=ProvenanceMeta(
                    engine=SearchEngine.STORE_FALLBACK,
                    query_type=query_type,
                    timings=timings,
                    degraded=True,
                    approximate_total=True,
                ),
                meta={"query": request.query},
            )
        timings["fallback_ms"] = _elapsed_ms(fallback_started)

        rows = rows[: window.limit]
        meta: dict[str, Any] = {"query": request.query}
        snapshot: dict[int, dict[str, Any]] = {}
        if rows:
            snapshot_started = time.perf_counter()
            try:
                snapshot = await store.fetch_snapshot([int(r["id"]) for r in rows])
            except QueryTimeout as e:
                logger.warning("Snapshot for fallback rows timed out: %s", e)
                meta["snapshot_skipped"] = True
            timings["snapshot_ms"] = _elapsed_ms(snapshot_started)

        items = [store.shape(row, snapshot.get(int(row["id"]))) for row in rows]
        total = window.offset + len(items)
        timings["total_ms"] = _elapsed_ms(started)
        return SearchResult(
            items=items,
            total=total,
            pagination=PaginationMeta.for_window(window, total),
            provenance=ProvenanceMeta(
                engine=SearchEngine.STORE_FALLBACK,
                query_type=query_type,
                timings=timings,
                approximate_total=True,
            ),
            meta=meta,
        )
