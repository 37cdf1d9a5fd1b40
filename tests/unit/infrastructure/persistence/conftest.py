"""
SQLite-backed fixtures for the raw SQL adapters.

Each test gets its own database file with a small, hand-checked catalogue:
three venues, four works, four persons. The ``v_venue_ranking`` view is not
created by default so the reduced-schema paths run unless a test adds it.

Usage:
    async def test_something(executor):
        adapter = SqlAlchemyVenueReadAdapter(executor)
        ...
"""

import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from scholar.infrastructure.persistence.sqlalchemy.query_executor import (
    DeadlineQueryExecutor,
)

SCHEMA = [
    """
    CREATE TABLE organizations (
        id INTEGER PRIMARY KEY,
        name TEXT,
        type TEXT,
        country_code TEXT
    )
    """,
    """
    CREATE TABLE venues (
        id INTEGER PRIMARY KEY,
        name TEXT,
        type TEXT,
        issn TEXT,
        eissn TEXT,
        scopus_id TEXT,
        wikidata_id TEXT,
        openalex_id TEXT,
        mag_id TEXT,
        publisher_id INTEGER,
        impact_factor REAL,
        created_at TEXT,
        updated_at TEXT,
        validation_status TEXT,
        citescore REAL,
        sjr REAL,
        snip REAL,
        open_access INTEGER,
        aggregation_type TEXT,
        coverage_start_year INTEGER,
        coverage_end_year INTEGER,
        works_count INTEGER,
        cited_by_count INTEGER,
        h_index INTEGER,
        i10_index INTEGER,
        two_year_mean_citedness REAL,
        homepage_url TEXT,
        country_code TEXT,
        is_in_doaj INTEGER,
        is_indexed_in_scopus INTEGER
    )
    """,
    """
    CREATE TABLE works (
        id INTEGER PRIMARY KEY,
        title TEXT,
        subtitle TEXT,
        abstract TEXT,
        work_type TEXT,
        language TEXT,
        created_at TEXT
    )
    """,
    """
    CREATE TABLE work_author_summary (
        work_id INTEGER PRIMARY KEY,
        author_string TEXT
    )
    """,
    """
    CREATE TABLE publications (
        id INTEGER PRIMARY KEY,
        work_id INTEGER,
        venue_id INTEGER,
        year INTEGER,
        volume TEXT,
        issue TEXT,
        pages TEXT,
        doi TEXT,
        peer_reviewed INTEGER,
        open_access INTEGER,
        publication_date TEXT
    )
    """,
    """
    CREATE TABLE persons (
        id INTEGER PRIMARY KEY,
        preferred_name TEXT,
        given_names TEXT,
        family_name TEXT,
        orcid TEXT,
        is_verified INTEGER
    )
    """,
    """
    CREATE TABLE authorships (
        work_id INTEGER,
        person_id INTEGER,
        position INTEGER,
        is_corresponding INTEGER
    )
    """,
    """
    CREATE TABLE subjects (
        id INTEGER PRIMARY KEY,
        term TEXT,
        vocabulary TEXT,
        lang TEXT
    )
    """,
    """
    CREATE TABLE venue_subjects (
        venue_id INTEGER,
        subject_id INTEGER,
        score REAL
    )
    """,
    """
    CREATE TABLE venue_yearly_stats (
        venue_id INTEGER,
        year INTEGER,
        works_count INTEGER,
        oa_works_count INTEGER,
        cited_by_count INTEGER
    )
    """,
]

SEED = [
    "INSERT INTO organizations VALUES (100, 'Graph Press', 'PUBLISHER', 'DE')",
    """
    INSERT INTO venues (id, name, type, issn, eissn, scopus_id, wikidata_id,
        publisher_id, impact_factor, created_at, coverage_start_year,
        works_count, cited_by_count, h_index, two_year_mean_citedness,
        open_access, is_in_doaj)
    VALUES (1, 'Journal of Graphs', 'JOURNAL', '1234-5678', '8765-4321',
        'SC1', 'Q1', 100, 2.5, '2023-05-01 10:00:00', 1990,
        3, 40, 4, 1.25, 1, 0)
    """,
    """
    INSERT INTO venues (id, name, type, issn, works_count)
    VALUES (2, 'Annals of Topology', 'JOURNAL', '2222-0000', 1)
    """,
    """
    INSERT INTO venues (id, name, type, works_count)
    VALUES (3, 'Graph Conference', 'CONFERENCE', 0)
    """,
    """
    INSERT INTO works VALUES
        (10, 'Colourings of Planar Graphs', NULL, 'Four colours suffice.',
         'ARTICLE', 'en', '2024-01-01 00:00:00'),
        (11, 'Graph Minors', 'Part XX', NULL, 'ARTICLE', 'en', NULL),
        (12, 'Knot Invariants', NULL, NULL, 'BOOK', 'de', NULL),
        (13, '100%_graph', NULL, NULL, NULL, NULL, NULL)
    """,
    """
    INSERT INTO work_author_summary VALUES
        (10, 'Ada Lovelace; Alan Turing; Emmy Noether; Kurt Goedel'),
        (11, 'Alan Turing')
    """,
    """
    INSERT INTO publications VALUES
        (1, 10, 1, 2019, '1', '1', '1-10', NULL, 0, 0, '2019-02-01'),
        (2, 10, 1, 2021, '3', '2', '5-20', '10.1000/col', 1, 1, '2021-06-01'),
        (3, 11, 1, 2020, '2', '4', '7-9', '10.1000/min', 1, 0, NULL),
        (4, 12, 2, 2018, NULL, NULL, NULL, NULL, 0, 0, NULL)
    """,
    """
    INSERT INTO persons VALUES
        (20, 'Ada Lovelace', 'Ada', 'Lovelace', '0000-0001', 0),
        (21, NULL, 'Alan', 'Turing', NULL, 1),
        (22, NULL, 'Emmy', 'Noether', NULL, 0),
        (23, NULL, 'Kurt', 'Goedel', NULL, 0)
    """,
    """
    INSERT INTO authorships VALUES
        (10, 20, 1, 1),
        (10, 21, 2, 0),
        (10, 22, 3, 0),
        (11, 21, 1, 1),
        (11, 99, 2, 0),
        (12, 22, 1, 0)
    """,
    """
    INSERT INTO subjects VALUES
        (1, 'Topology', 'ASJC', 'en'),
        (2, 'Combinatorics', 'ASJC', 'en')
    """,
    """
    INSERT INTO venue_subjects VALUES
        (1, 1, 0.4),
        (1, 2, 0.9),
        (2, 1, 0.8)
    """,
    """
    INSERT INTO venue_yearly_stats VALUES
        (1, 2019, 1, 0, 5),
        (1, 2020, 1, 0, 3),
        (1, 2021, 1, 1, 2),
        (1, 2022, 0, 0, 0)
    """,
]

RANKING_VIEW = """
    CREATE VIEW v_venue_ranking AS
    SELECT 1 AS venue_id,
           7 AS total_works,
           2 AS open_access_works,
           28.57 AS open_access_percentage,
           2001 AS first_publication_year,
           2022 AS latest_publication_year,
           11 AS unique_authors
"""


async def run_sql(engine, *statements: str) -> None:
    """Execute DDL or DML statements in one transaction."""
    async with engine.begin() as conn:
        for statement in statements:
            await conn.execute(text(statement))


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """
    Async engine on a fresh, seeded SQLite file.

    NullPool gives every concurrent query its own connection, like a real
    pooled server database.
    """
    db_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'catalogue.db'}",
        poolclass=NullPool,
    )
    await run_sql(db_engine, *SCHEMA, *SEED)
    yield db_engine
    await db_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def executor(engine):
    return DeadlineQueryExecutor(engine, default_timeout_ms=5000)


@pytest_asyncio.fixture(scope="function")
async def alter_schema(engine):
    """Callable running extra statements, e.g. to drop a table."""

    async def _alter(*statements: str) -> None:
        await run_sql(engine, *statements)

    return _alter


@pytest_asyncio.fixture(scope="function")
async def ranking_view(engine):
    await run_sql(engine, RANKING_VIEW)
