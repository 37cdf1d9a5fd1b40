"""Search index adapter implementing FullTextIndexPort.

Translates search filters into the index's JSON query language and parses
the ranked hits. After a failure the adapter stops calling the index for a
back-off period and fails fast, so a dead index costs one timeout rather
than one per request.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from scholar.application.ports.search import FullTextIndexPort, IndexHits
from scholar.domain.search import EntityKind, FilterValue, IndexUnavailable

if TYPE_CHECKING:
    from scholar.infrastructure.integration.search_index.client import (
        SearchIndexClient,
    )

logger = logging.getLogger(__name__)

DEFAULT_MAX_MATCHES = 1000


class SearchIndexAdapter(FullTextIndexPort):
    """Infrastructure adapter that implements FullTextIndexPort."""

    def __init__(
        self,
        client: SearchIndexClient,
        tables: dict[EntityKind, str],
        enabled: bool = True,
        retry_backoff_seconds: float = 30.0,
        max_matches: int = 10000,
    ):
        self._client = client
        self._tables = tables
        self._enabled = enabled
        self._retry_backoff_seconds = retry_backoff_seconds
        self._max_matches = max_matches
        self._disabled_until = 0.0

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def available(self) -> bool:
        return self._enabled and time.monotonic() >= self._disabled_until

    async def search_ids(
        self,
        entity_kind: EntityKind,
        query: str,
        filters: dict[str, FilterValue],
        limit: int,
        offset: int,
    ) -> IndexHits:
        if not self._enabled:
            raise IndexUnavailable(reason="disabled")
        if not self.available:
            raise IndexUnavailable(reason="backoff")

        payload = self._build_payload(entity_kind, query, filters, limit, offset)
        try:
            body = await self._client.search(payload)
            hits = self._parse_hits(body)
        except IndexUnavailable:
            self._trip()
            raise
        logger.debug(
            "Index %s returned %d of %d ids",
            payload["index"],
            len(hits.ids),
            hits.total,
        )
        return hits

    async def ping(self) -> bool:
        if not self._enabled:
            return False
        return await self._client.health_check()

    def _trip(self) -> None:
        self._disabled_until = time.monotonic() + self._retry_backoff_seconds
        logger.warning(
            "Search index marked unavailable for %.0f seconds",
            self._retry_backoff_seconds,
        )

    def _build_payload(
        self,
        entity_kind: EntityKind,
        query: str,
        filters: dict[str, FilterValue],
        limit: int,
        offset: int,
    ) -> dict[str, Any]:
        must: list[dict[str, Any]] = [{"match": {"*": query}}]

        if entity_kind is EntityKind.WORK:
            if "type" in filters:
                must.append({"equals": {"work_type": filters["type"]}})
            if "language" in filters and filters["language"] != "unknown":
                must.append({"equals": {"language": filters["language"]}})
            if "peer_reviewed" in filters:
                must.append({"equals": {"peer_reviewed": int(bool(filters["peer_reviewed"]))}})
            year_range: dict[str, Any] = {}
            if "year_from" in filters:
                year_range["gte"] = filters["year_from"]
            if "year_to" in filters:
                year_range["lte"] = filters["year_to"]
            if year_range:
                must.append({"range": {"year": year_range}})
            if "venue_name" in filters:
                must.append({"match": {"venue_name": filters["venue_name"]}})
            sort: list[dict[str, str]] = [
                {"_score": "desc"},
                {"year": "desc"},
                {"id": "desc"},
            ]
        else:
            if "verified" in filters:
                must.append({"equals": {"is_verified": int(bool(filters["verified"]))}})
            sort = [{"_score": "desc"}, {"id": "asc"}]

        max_matches = min(self._max_matches, max(DEFAULT_MAX_MATCHES, offset + limit))
        return {
            "index": self._tables[entity_kind],
            "query": {"bool": {"must": must}},
            "sort": sort,
            "limit": limit,
            "offset": offset,
            "options": {"max_matches": max_matches},
            "_source": False,
        }

    @staticmethod
    def _parse_hits(body: dict[str, Any]) -> IndexHits:
        try:
            hits = body["hits"]
            ids = [int(hit["_id"]) for hit in hits.get("hits", [])]
            total = int(hits.get("total", len(ids)))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Malformed search index payload: %s", e)
            raise IndexUnavailable(reason="malformed_payload") from e
        took = body.get("took")
        return IndexHits(
            ids=ids,
            total=total,
            query_time_ms=int(took) if isinstance(took, (int, float)) else None,
        )
