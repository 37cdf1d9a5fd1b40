"""Ports for the two search backends.

The full-text index answers "which ids match, in what order"; an entity
store answers "what do these ids look like". The orchestrator owns the
protocol between them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from scholar.domain.search import EntityKind, FilterValue


@dataclass(frozen=True)
class IndexHits:
    """Ranked ids for one page of an index query."""

    ids: list[int] = field(default_factory=list)
    total: int = 0
    query_time_ms: int | None = None


class FullTextIndexPort(ABC):
    @property
    @abstractmethod
    def enabled(self) -> bool: ...

    @abstractmethod
    async def search_ids(
        self,
        entity_kind: EntityKind,
        query: str,
        filters: dict[str, FilterValue],
        limit: int,
        offset: int,
    ) -> IndexHits:
        """Return matching ids in rank order.

        Raises
        ------
        IndexUnavailable
            On connect errors, timeouts, HTTP errors or malformed payloads.
        """

    @abstractmethod
    async def ping(self) -> bool: ...


class EntityStorePort(ABC):
    """Read access to one entity kind in the relational store.

    Rows returned by ``hydrate`` and ``substring_search`` must carry an
    integer ``id`` and only JSON-safe values.
    """

    entity_kind: EntityKind

    @abstractmethod
    async def hydrate(self, ids: list[int]) -> list[dict[str, Any]]:
        """Fetch primary rows for ``ids`` in no particular order."""

    @abstractmethod
    async def fetch_snapshot(self, ids: list[int]) -> dict[int, dict[str, Any]]:
        """Fetch secondary data (publications, metrics) keyed by id."""

    @abstractmethod
    async def substring_search(
        self,
        query: str,
        filters: dict[str, FilterValue],
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        """Substring match ordered by id descending, one page only."""

    @abstractmethod
    def shape(
        self,
        row: dict[str, Any],
        snapshot: dict[str, Any] | None,
    ) -> dict[str, Any]:
        """Merge a primary row with its snapshot into a result item."""
