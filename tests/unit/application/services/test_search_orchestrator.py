"""Tests for SearchOrchestrator."""

import random
from unittest.mock import AsyncMock

import pytest

from scholar.application.ports.search import EntityStorePort, IndexHits
from scholar.application.services.search import SearchOrchestrator
from scholar.domain.search import (
    EntityKind,
    IndexUnavailable,
    QueryTimeout,
    SearchEngine,
    SearchRequest,
    StoreUnavailable,
)
from scholar.domain.shared.value_objects import Pagination


class FakeWorkStore(EntityStorePort):
    """In-memory store returning rows in shuffled order."""

    entity_kind = EntityKind.WORK

    def __init__(self, titles: dict[int, str], snapshots: dict[int, dict] | None = None):
        self.titles = titles
        self.snapshots = snapshots or {}
        self.hydrate = AsyncMock(side_effect=self._hydrate)
        self.fetch_snapshot = AsyncMock(side_effect=self._snapshot)
        self.substring_search = AsyncMock(side_effect=self._search)

    async def hydrate(self, ids):
        return await self._hydrate(ids)

    async def fetch_snapshot(self, ids):
        return await self._snapshot(ids)

    async def substring_search(self, query, filters, limit, offset):
        return await self._search(query, filters, limit, offset)

    async def _hydrate(self, ids):
        rows = [{"id": i, "title": self.titles[i]} for i in ids if i in self.titles]
        random.shuffle(rows)
        return rows

    async def _snapshot(self, ids):
        return {i: self.snapshots[i] for i in ids if i in self.snapshots}

    async def _search(self, query, filters, limit, offset):
        matches = sorted(
            (i for i, t in self.titles.items() if query.lower() in t.lower()),
            reverse=True,
        )
        return [{"id": i, "title": self.titles[i]} for i in matches[offset : offset + limit]]

    def shape(self, row, snapshot):
        return {
            "id": row["id"],
            "title": row["title"],
            "publication_year": snapshot.get("year") if snapshot else None,
        }


@pytest.fixture
def store():
    return FakeWorkStore(
        {
            3: "Anthropology of Markets",
            7: "Kinship and Anthropology",
            9: "Applied Anthropology",
            12: "Graph Theory",
        },
        snapshots={3: {"year": 2001}, 9: {"year": 2019}},
    )


@pytest.fixture
def index():
    mock = AsyncMock()
    mock.enabled = True
    return mock


def _request(query="anthropology", filters=None):
    return SearchRequest.create(query, EntityKind.WORK, filters)


class TestIndexPath:
    @pytest.mark.asyncio
    async def test_items_follow_index_order(self, index, store):
        index.search_ids.return_value = IndexHits(ids=[9, 3, 7], total=3, query_time_ms=4)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        for _ in range(5):
            result = await orchestrator.search(_request(), Pagination.normalize())
            assert [item["id"] for item in result.items] == [9, 3, 7]

        assert result.provenance.engine is SearchEngine.INDEX_PLUS_STORE
        assert result.provenance.approximate_total is False
        assert result.total == 3

    @pytest.mark.asyncio
    async def test_missing_snapshot_leaves_fields_none(self, index, store):
        index.search_ids.return_value = IndexHits(ids=[7, 9], total=2)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize())

        assert result.items[0] == {
            "id": 7,
            "title": "Kinship and Anthropology",
            "publication_year": None,
        }
        assert result.items[1]["publication_year"] == 2019

    @pytest.mark.asyncio
    async def test_ids_unknown_to_store_are_dropped(self, index, store):
        index.search_ids.return_value = IndexHits(ids=[9, 404, 3], total=3)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize())

        assert [item["id"] for item in result.items] == [9, 3]
        assert result.meta["missing_ids"] == [404]

    @pytest.mark.asyncio
    async def test_empty_index_result_skips_hydration(self, index, store):
        index.search_ids.return_value = IndexHits(ids=[], total=0)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize())

        assert result.items == []
        assert result.total == 0
        assert result.provenance.engine is SearchEngine.INDEX_PLUS_STORE
        assert result.pagination.total_pages == 0
        store.hydrate.assert_not_called()

    @pytest.mark.asyncio
    async def test_items_never_exceed_limit(self, index, store):
        index.search_ids.return_value = IndexHits(ids=[9, 3, 7, 12], total=4)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize(limit=2))

        assert len(result.items) <= 2
        assert [item["id"] for item in result.items] == [9, 3]

    @pytest.mark.asyncio
    async def test_index_receives_window(self, index, store):
        index.search_ids.return_value = IndexHits(ids=[], total=0)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        await orchestrator.search(
            _request(filters={"type": "ARTICLE"}),
            Pagination.normalize(page=3, limit=10),
        )

        index.search_ids.assert_awaited_once_with(
            EntityKind.WORK,
            "anthropology",
            {"type": "ARTICLE"},
            10,
            20,
        )

    @pytest.mark.asyncio
    async def test_records_phase_timings(self, index, store):
        index.search_ids.return_value = IndexHits(ids=[9], total=1, query_time_ms=3)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize())

        timings = result.provenance.timings
        assert timings["index_ms"] == 3
        for phase in ("hydrate_ms", "snapshot_ms", "total_ms"):
            assert timings[phase] >= 0


class TestFallbackPath:
    @pytest.mark.asyncio
    async def test_index_failure_falls_back_to_store(self, index, store):
        index.search_ids.side_effect = IndexUnavailable(reason="connect")
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize())

        assert result.provenance.engine is SearchEngine.STORE_FALLBACK
        assert result.provenance.approximate_total is True
        assert result.total >= 0
        assert [item["id"] for item in result.items] == [9, 7, 3]
        assert result.items[0]["publication_year"] == 2019

    @pytest.mark.asyncio
    async def test_fallback_total_is_offset_plus_rows(self, index, store):
        index.search_ids.side_effect = IndexUnavailable()
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize(page=2, limit=2))

        assert [item["id"] for item in result.items] == [3]
        assert result.total == 3

    @pytest.mark.asyncio
    async def test_hydration_timeout_retries_via_fallback(self, index, store):
        index.search_ids.return_value = IndexHits(ids=[9, 3, 7], total=3)
        store.hydrate.side_effect = QueryTimeout("works_hydrate", 6000)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize())

        assert result.provenance.engine is SearchEngine.STORE_FALLBACK
        assert [item["id"] for item in result.items] == [9, 7, 3]
        store.substring_search.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fallback_timeout_returns_degraded_result(self, index, store):
        index.search_ids.side_effect = IndexUnavailable()
        store.substring_search.side_effect = QueryTimeout("works_substring_search", 4000)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize(page=3, limit=10))

        assert result.items == []
        assert result.total == 20
        assert result.provenance.degraded is True
        assert result.provenance.engine is SearchEngine.STORE_FALLBACK

    @pytest.mark.asyncio
    async def test_fallback_snapshot_timeout_keeps_rows(self, index, store):
        index.search_ids.side_effect = IndexUnavailable()
        store.fetch_snapshot.side_effect = QueryTimeout("works_publication_snapshot", 6000)
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(), Pagination.normalize())

        assert [item["publication_year"] for item in result.items] == [None, None, None]
        assert result.meta["snapshot_skipped"] is True

    @pytest.mark.asyncio
    async def test_short_query_skips_index(self, index, store):
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        result = await orchestrator.search(_request(query="a"), Pagination.normalize())

        index.search_ids.assert_not_called()
        assert result.provenance.query_type == "short_query"
        assert result.provenance.engine is SearchEngine.STORE_FALLBACK

    @pytest.mark.asyncio
    async def test_store_outage_propagates(self, index, store):
        index.search_ids.side_effect = IndexUnavailable()
        store.substring_search.side_effect = StoreUnavailable()
        orchestrator = SearchOrchestrator(index, {EntityKind.WORK: store})

        with pytest.raises(StoreUnavailable):
            await orchestrator.search(_request(), Pagination.normalize())
