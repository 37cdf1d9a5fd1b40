"""Tests for the Typer CLI."""

import json
import sqlite3
from unittest.mock import AsyncMock, MagicMock

import pytest
from typer.testing import CliRunner

from scholar.application.dtos.search import ProvenanceMeta, SearchResult
from scholar.application.dtos.venues import VenueListFilters, VenueListResult
from scholar.domain.search import SearchEngine
from scholar.domain.shared.exceptions import ErrorCode, ValidationError
from scholar.domain.shared.value_objects import PaginationMeta
from scholar.presentation import dependencies
from scholar.presentation.cli.app import app

runner = CliRunner()


@pytest.fixture
def shutdown(monkeypatch):
    mock = AsyncMock()
    monkeypatch.setattr(dependencies, "shutdown", mock)
    return mock


def _install(monkeypatch, getter_name, result=None, error=None):
    query = MagicMock()
    query.execute = AsyncMock(return_value=result, side_effect=error)
    monkeypatch.setattr(dependencies, getter_name, lambda: query)
    return query


def _search_result():
    return SearchResult(
        items=[{"id": 9, "title": "Graph Minors"}],
        total=1,
        pagination=PaginationMeta.build(1, 5, 1),
        provenance=ProvenanceMeta(engine=SearchEngine.INDEX_PLUS_STORE, query_type="search_hydrate"),
    )


class TestSearchCommands:
    def test_search_works_prints_json(self, monkeypatch, shutdown):
        query = _install(monkeypatch, "get_search_works_query", _search_result())

        result = runner.invoke(
            app, ["search", "works", "graph", "-f", "type=ARTICLE", "--limit", "5"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["items"] == [{"id": 9, "title": "Graph Minors"}]
        query.execute.assert_awaited_once_with(
            "graph", {"type": "ARTICLE"}, page=None, limit=5, offset=None
        )
        shutdown.assert_awaited_once()

    def test_malformed_filter_exits_with_usage_error(self, monkeypatch, shutdown):
        query = _install(monkeypatch, "get_search_works_query", _search_result())

        result = runner.invoke(app, ["search", "works", "graph", "-f", "type"])

        assert result.exit_code == 2
        query.execute.assert_not_called()

    def test_search_persons_verified_flag(self, monkeypatch, shutdown):
        query = _install(monkeypatch, "get_search_persons_query", _search_result())

        result = runner.invoke(app, ["search", "persons", "turing", "--verified"])

        assert result.exit_code == 0, result.output
        assert query.execute.await_args.args == ("turing", {"verified": True})

    def test_domain_errors_exit_non_zero(self, monkeypatch, shutdown):
        _install(
            monkeypatch,
            "get_search_works_query",
            error=ValidationError("Query must not be empty", ErrorCode.INVALID_QUERY),
        )

        result = runner.invoke(app, ["search", "works", " "])

        assert result.exit_code == 1
        assert "INVALID_QUERY" in result.output
        shutdown.assert_awaited_once()


class TestVenueCommands:
    def test_unknown_venue(self, monkeypatch, shutdown):
        _install(monkeypatch, "get_venue_enriched_query", None)

        result = runner.invoke(app, ["venues", "show", "404"])

        assert result.exit_code == 1
        assert "Not found" in result.output

    def test_show_passes_include_flags(self, monkeypatch, shutdown):
        query = _install(monkeypatch, "get_venue_enriched_query", None)

        runner.invoke(app, ["venues", "show", "42", "--no-top-authors", "--no-recent-works"])

        query.execute.assert_awaited_once_with(
            42,
            include_subjects=True,
            include_yearly=True,
            include_top_authors=False,
            include_recent_works=False,
        )

    def test_list_builds_filters(self, monkeypatch, shutdown):
        query = _install(
            monkeypatch,
            "get_list_venues_query",
            VenueListResult(items=[], pagination=PaginationMeta.build(1, 10, 0)),
        )

        result = runner.invoke(
            app,
            ["venues", "list", "--type", "JOURNAL", "--sort-by", "impact_factor", "--sort-order", "DESC"],
        )

        assert result.exit_code == 0, result.output
        assert query.execute.await_args.args[0] == VenueListFilters(
            type="JOURNAL", sort_by="impact_factor", sort_order="DESC"
        )


class TestHealthCommand:
    def test_reports_each_component(self, monkeypatch, shutdown):
        for getter, ok in (
            ("get_query_executor", True),
            ("get_index_adapter", False),
            ("get_cache_store", True),
        ):
            component = MagicMock()
            component.ping = AsyncMock(return_value=ok)
            monkeypatch.setattr(dependencies, getter, lambda c=component: c)

        result = runner.invoke(app, ["health"])

        assert result.exit_code == 0, result.output
        assert "search_index" in result.output
        assert "down" in result.output


class TestEndToEnd:
    """Full wiring against a SQLite file with the index and Redis disabled."""

    @pytest.fixture
    def database(self, tmp_path, monkeypatch):
        path = tmp_path / "cli.db"
        conn = sqlite3.connect(path)
        conn.executescript(
            """
            CREATE TABLE works (id INTEGER PRIMARY KEY, title TEXT, subtitle TEXT,
                abstract TEXT, work_type TEXT, language TEXT, created_at TEXT);
            CREATE TABLE work_author_summary (work_id INTEGER, author_string TEXT);
            CREATE TABLE publications (id INTEGER PRIMARY KEY, work_id INTEGER,
                venue_id INTEGER, year INTEGER, peer_reviewed INTEGER,
                open_access INTEGER, doi TEXT);
            CREATE TABLE venues (id INTEGER PRIMARY KEY, name TEXT, type TEXT);
            INSERT INTO works (id, title, work_type) VALUES
                (1, 'Graph Minors', 'ARTICLE'),
                (2, 'Knot Invariants', 'BOOK');
            INSERT INTO publications VALUES (1, 1, 1, 2004, 1, 0, NULL);
            INSERT INTO venues VALUES (1, 'Journal of Graphs', 'JOURNAL');
            """
        )
        conn.commit()
        conn.close()
        monkeypatch.setenv("DATABASE_URL_OVERRIDE", f"sqlite+aiosqlite:///{path}")
        monkeypatch.setenv("INDEX_ENABLED", "false")
        monkeypatch.setenv("REDIS_ENABLED", "false")
        monkeypatch.setenv("LOG_LEVEL", "CRITICAL")
        return path

    def test_search_falls_back_to_store(self, database):
        result = runner.invoke(app, ["search", "works", "graph"])

        assert result.exit_code == 0, result.output
        body = json.loads(result.stdout)
        assert [item["id"] for item in body["items"]] == [1]
        assert body["items"][0]["publication_year"] == 2004
        assert body["items"][0]["venue"] == {"name": "Journal of Graphs", "type": "JOURNAL"}
        assert body["provenance"]["engine"] == "STORE_FALLBACK"
        assert body["provenance"]["approximate_total"] is True
