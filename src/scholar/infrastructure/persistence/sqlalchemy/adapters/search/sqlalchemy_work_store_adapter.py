"""Work hydration and substring search over the relational store."""

from __future__ import annotations

import logging
from typing import Any

from scholar.application.ports.search import EntityStorePort
from scholar.domain.search import EntityKind, FilterValue
from scholar.infrastructure.persistence.sqlalchemy.adapters.search.like_pattern import (  # NOQA: E501
    contains_pattern,
)
from scholar.infrastructure.persistence.sqlalchemy.query_executor import (
    DeadlineQueryExecutor,
)
from scholar.infrastructure.persistence.sqlalchemy.row_values import (
    to_bool,
    to_int,
    to_iso,
)

logger = logging.getLogger(__name__)

AUTHORS_PREVIEW_SIZE = 3
DEFAULT_WORK_TYPE = "ARTICLE"

_WORK_COLUMNS = """
    w.id,
    w.title,
    w.subtitle,
    w.abstract,
    w.work_type,
    w.language,
    w.created_at,
    was.author_string
"""

HYDRATE_SQL = f"""
    SELECT {_WORK_COLUMNS}
    FROM works w
    LEFT JOIN work_author_summary was ON was.work_id = w.id
    WHERE w.id IN :ids
"""

# Latest publication per work
SNAPSHOT_SQL = """
    SELECT p1.id AS publication_id,
           p1.work_id,
           p1.year AS publication_year,
           p1.peer_reviewed,
           p1.open_access,
           p1.doi,
           v.name AS venue_name,
           v.type AS venue_type
    FROM publications p1
    INNER JOIN (
        SELECT work_id, MAX(year) AS max_year
        FROM publications
        WHERE work_id IN :ids
        GROUP BY work_id
    ) latest ON latest.work_id = p1.work_id AND latest.max_year = p1.year
    LEFT JOIN venues v ON p1.venue_id = v.id
    ORDER BY p1.id DESC
"""


class SqlAlchemyWorkStoreAdapter(EntityStorePort):
    """Works read side for the search orchestrator."""

    entity_kind = EntityKind.WORK

    def __init__(
        self,
        executor: DeadlineQueryExecutor,
        hydrate_timeout_ms: int = 6000,
        fallback_timeout_ms: int = 4000,
    ):
        self._executor = executor
        self._hydrate_timeout_ms = hydrate_timeout_ms
        self._fallback_timeout_ms = fallback_timeout_ms

    async def hydrate(self, ids: list[int]) -> list[dict[str, Any]]:
        if not ids:
            return []
        return await self._executor.fetch_all(
            HYDRATE_SQL,
            {"ids": list(ids)},
            timeout_ms=self._hydrate_timeout_ms,
            label="works_hydrate",
        )

    async def fetch_snapshot(self, ids: list[int]) -> dict[int, dict[str, Any]]:
        if not ids:
            return {}
        rows = await self._executor.fetch_all(
            SNAPSHOT_SQL,
            {"ids": list(ids)},
            timeout_ms=self._hydrate_timeout_ms,
            label="works_publication_snapshot",
        )
        snapshot: dict[int, dict[str, Any]] = {}
        for row in rows:
            snapshot.setdefault(int(row["work_id"]), row)
        return snapshot

    async def substring_search(
        self,
        query: str,
        filters: dict[str, FilterValue],
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        where = ["LOWER(w.title) LIKE :pattern ESCAPE '!'"]
        params: dict[str, Any] = {
            "pattern": contains_pattern(query),
            "limit": limit,
            "offset": offset,
        }
        if "type" in filters:
            where.append("w.work_type = :work_type")
            params["work_type"] = filters["type"]
        if "language" in filters:
            where.append("w.language = :language")
            params["language"] = filters["language"]

        year_conditions = []
        if "year_from" in filters:
            year_conditions.append("p.year >= :year_from")
            params["year_from"] = filters["year_from"]
        if "year_to" in filters:
            year_conditions.append("p.year <= :year_to")
            params["year_to"] = filters["year_to"]
        if year_conditions:
            where.append(
                "EXISTS (SELECT 1 FROM publications p WHERE p.work_id = w.id AND "
                + " AND ".join(year_conditions)
                + ")",
            )

        ignored = {"peer_reviewed", "venue_name"} & filters.keys()
        if ignored:
            logger.debug("Store search ignores index-only filters: %s", sorted(ignored))

        sql = f"""
            SELECT {_WORK_COLUMNS}
            FROM works w
            LEFT JOIN work_author_summary was ON was.work_id = w.id
            WHERE {" AND ".join(where)}
            ORDER BY w.id DESC
            LIMIT :limit OFFSET :offset
        """
        return await self._executor.fetch_all(
            sql,
            params,
            timeout_ms=self._fallback_timeout_ms,
            label="works_substring_search",
        )

    def shape(
        self,
        row: dict[str, Any],
        snapshot: dict[str, Any] | None,
    ) -> dict[str, Any]:
        author_string = row.get("author_string") or ""
        authors = [a.strip() for a in author_string.split(";") if a.strip()]
        work_type = row.get("work_type") or DEFAULT_WORK_TYPE

        venue = None
        if snapshot is not None and snapshot.get("venue_name"):
            venue = {"name": snapshot["venue_name"], "type": snapshot.get("venue_type")}

        return {
            "id": int(row["id"]),
            "title": row.get("title"),
            "subtitle": row.get("subtitle") or None,
            "abstract": row.get("abstract") or None,
            "type": work_type,
            "language": row.get("language") or None,
            "publication_year": (
                to_int(snapshot.get("publication_year"), None) if snapshot else None
            ),
            "doi": snapshot.get("doi") if snapshot else None,
            "open_access": to_bool(snapshot.get("open_access")) if snapshot else None,
            "peer_reviewed": to_bool(snapshot.get("peer_reviewed")) if snapshot else None,
            "venue": venue,
            "author_count": len(authors),
            "first_author": authors[0] if authors else None,
            "authors_preview": authors[:AUTHORS_PREVIEW_SIZE],
            "added_to_database": to_iso(row.get("created_at")),
        }
