"""Person hydration and substring search over the relational store."""

from __future__ import annotations

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
    compose_name,
    to_bool,
    to_int,
)

_PERSON_COLUMNS = """
    p.id,
    p.preferred_name,
    p.given_names,
    p.family_name,
    p.orcid,
    p.is_verified
"""

HYDRATE_SQL = f"""
    SELECT {_PERSON_COLUMNS}
    FROM persons p
    WHERE p.id IN :ids
"""

METRICS_SQL = """
    SELECT a.person_id,
           COUNT(DISTINCT a.work_id) AS works_count,
           MAX(pub.year) AS latest_publication_year
    FROM authorships a
    LEFT JOIN publications pub ON pub.work_id = a.work_id
    WHERE a.person_id IN :ids
    GROUP BY a.person_id
"""


class SqlAlchemyPersonStoreAdapter(EntityStorePort):
    entity_kind = EntityKind.PERSON

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
            label="persons_hydrate",
        )

    async def fetch_snapshot(self, ids: list[int]) -> dict[int, dict[str, Any]]:
        if not ids:
            return {}
        rows = await self._executor.fetch_all(
            METRICS_SQL,
            {"ids": list(ids)},
            timeout_ms=self._hydrate_timeout_ms,
            label="persons_metrics",
        )
        return {int(row["person_id"]): row for row in rows}

    async def substring_search(
        self,
        query: str,
        filters: dict[str, FilterValue],
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        where = [
            "(LOWER(p.preferred_name) LIKE :pattern ESCAPE '!'"
            " OR LOWER(p.given_names) LIKE :pattern ESCAPE '!'"
            " OR LOWER(p.family_name) LIKE :pattern ESCAPE '!')",
        ]
        params: dict[str, Any] = {
            "pattern": contains_pattern(query),
            "limit": limit,
            "offset": offset,
        }
        if "verified" in filters:
            where.append("p.is_verified = :verified")
            params["verified"] = bool(filters["verified"])

        sql = f"""
            SELECT {_PERSON_COLUMNS}
            FROM persons p
            WHERE {" AND ".join(where)}
            ORDER BY p.id DESC
            LIMIT :limit OFFSET :offset
        """
        return await self._executor.fetch_all(
            sql,
            params,
            timeout_ms=self._fallback_timeout_ms,
            label="persons_substring_search",
        )

    def shape(
        self,
        row: dict[str, Any],
        snapshot: dict[str, Any] | None,
    ) -> dict[str, Any]:
        return {
            "id": int(row["id"]),
            "name": compose_name(
                row.get("preferred_name"),
                row.get("given_names"),
                row.get("family_name"),
            ),
            "preferred_name": row.get("preferred_name"),
            "given_names": row.get("given_names"),
            "family_name": row.get("family_name"),
            "orcid": row.get("orcid") or None,
            "is_verified": to_bool(row.get("is_verified")),
            "metrics": {
                "works_count": (
                    to_int(snapshot.get("works_count")) if snapshot else None
                ),
                "latest_publication_year": (
                    to_int(snapshot.get("latest_publication_year"), None)
                    if snapshot
                    else None
                ),
            },
        }
