"""SQLAlchemy implementation of VenueReadPort.

A venue record is merged from up to six queries that run concurrently, each
through ``DeadlineQueryExecutor.run_variant``. Optional dimensions that hit
schema differences come back empty and leave a warning. A timeout or drift
of the base or list query is raised for the caller to degrade; a failed
count only drops the total.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any

from scholar.application.dtos.venues import (
    EnrichmentOptions,
    EnrichmentResult,
    PublicationSummary,
    PublicationTrendPoint,
    RecentWork,
    RecentWorkAuthor,
    SubjectEntry,
    TopAuthor,
    VenueIdentifiers,
    VenueMetrics,
    VenuePublisher,
    VenueRecord,
    YearlyStat,
)
from scholar.application.ports.venues import VenueReadPort
from scholar.domain.search import QueryTimeout, SchemaDrift
from scholar.infrastructure.persistence.sqlalchemy.adapters.search.like_pattern import (  # NOQA: E501
    contains_pattern,
)
from scholar.infrastructure.persistence.sqlalchemy.adapters.venues import venue_sql
from scholar.infrastructure.persistence.sqlalchemy.query_executor import (
    DeadlineQueryExecutor,
    QueryVariant,
    VariantOutcome,
)
from scholar.infrastructure.persistence.sqlalchemy.row_values import (
    compose_name,
    to_bool,
    to_float,
    to_int,
    to_iso,
    to_str,
)

logger = logging.getLogger(__name__)

TOP_AUTHORS_LIMIT = 10
RECENT_WORKS_LIMIT = 10
COUNT_UNAVAILABLE_WARNING = "Venue total estimated: count unavailable"

_EXTERNAL_IDENTIFIERS = (
    ("scopus_source_id", "SCOPUS_ID"),
    ("wikidata_id", "WIKIDATA_ID"),
    ("openalex_id", "OPENALEX_ID"),
    ("mag_id", "MAG_ID"),
)


def _dedupe(messages: list[str]) -> list[str]:
    return list(dict.fromkeys(messages))


def _top_author_sort_key(author: TopAuthor) -> tuple:
    # works desc, best position asc with unknown last, then name
    return (
        -author.works_count,
        author.best_position is None,
        author.best_position or 0,
        (author.name or "").lower(),
    )


def _record_from_row(row: dict[str, Any]) -> VenueRecord:
    external = {
        label: str(row[column])
        for column, label in _EXTERNAL_IDENTIFIERS
        if row.get(column)
    }
    return VenueRecord(
        id=int(row["id"]),
        name=row.get("name"),
        type=row.get("type"),
        issn=row.get("issn"),
        eissn=row.get("eissn"),
        impact_factor=to_float(row.get("impact_factor")),
        citescore=to_float(row.get("citescore")),
        sjr=to_float(row.get("sjr")),
        snip=to_float(row.get("snip")),
        two_year_mean_citedness=to_float(row.get("two_year_mean_citedness")),
        open_access=to_bool(row.get("open_access")),
        aggregation_type=row.get("aggregation_type"),
        coverage_start_year=to_int(row.get("coverage_start_year"), None),
        coverage_end_year=to_int(row.get("coverage_end_year"), None),
        homepage_url=row.get("homepage_url"),
        country_code=row.get("country_code"),
        is_in_doaj=to_bool(row.get("is_in_doaj")),
        is_indexed_in_scopus=to_bool(row.get("is_indexed_in_scopus")),
        validation_status=row.get("validation_status"),
        works_count=to_int(row.get("works_count_precomputed")) or 0,
        created_at=to_iso(row.get("created_at")),
        updated_at=to_iso(row.get("updated_at")),
        identifiers=VenueIdentifiers(
            issn=row.get("issn"),
            eissn=row.get("eissn"),
            scopus_source_id=to_str(row.get("scopus_source_id")),
            external=external,
        ),
        publisher=VenuePublisher(
            id=to_int(row.get("publisher_id"), None),
            name=row.get("publisher_name"),
            type=row.get("publisher_type"),
            country_code=row.get("publisher_country"),
        ),
    )


def _publication_summary(record: VenueRecord) -> PublicationSummary:
    """Coverage years win; yearly stats fill the gaps."""
    first_year = record.coverage_start_year
    latest_year = record.coverage_end_year
    yearly = record.yearly_stats
    if yearly:
        years_with_works = [y.year for y in yearly if y.works_count > 0 and y.year]
        years = years_with_works or [y.year for y in yearly if y.year]
        if years:
            first_year = first_year or min(years)
            latest_year = latest_year or max(years)
    return PublicationSummary(
        first_publication_year=first_year,
        latest_publication_year=latest_year,
        publication_trend=[
            PublicationTrendPoint(
                year=y.year,
                works_count=y.works_count,
                oa_works_count=y.oa_works_count,
            )
            for y in yearly
        ],
    )


class SqlAlchemyVenueReadAdapter(VenueReadPort):
    """Venue read adapter over raw SQL."""

    def __init__(
        self,
        executor: DeadlineQueryExecutor,
        aggregate_timeout_ms: int = 8000,
        point_timeout_ms: int = 3000,
    ):
        self._executor = executor
        self._aggregate_timeout_ms = aggregate_timeout_ms
        self._point_timeout_ms = point_timeout_ms

    async def _run(self, variant: QueryVariant, params: dict[str, Any]) -> VariantOutcome:
        return await self._executor.run_variant(
            variant,
            params,
            timeout_ms=self._aggregate_timeout_ms,
        )

    async def enrich(
        self,
        venue_ids: list[int],
        options: EnrichmentOptions,
    ) -> EnrichmentResult:
        unique_ids = list(dict.fromkeys(int(v) for v in venue_ids if v))
        if not unique_ids:
            return EnrichmentResult()

        params = {"venue_ids": unique_ids}

        async def skipped() -> VariantOutcome:
            return VariantOutcome(skipped=True)

        base, stats, unique_authors, subjects, yearly, top_authors = await asyncio.gather(
            self._run(venue_sql.BASE, params),
            self._run(venue_sql.STATS, params),
            (
                self._run(venue_sql.UNIQUE_AUTHORS, params)
                if options.include_unique_authors
                else skipped()
            ),
            self._run(venue_sql.SUBJECTS, params) if options.include_subjects else skipped(),
            (
                self._run(venue_sql.YEARLY_STATS, params)
                if options.include_yearly
                else skipped()
            ),
            (
                self._run(venue_sql.TOP_AUTHORS, params)
                if options.include_top_authors
                else skipped()
            ),
        )

        stats_by_venue = {int(r["venue_id"]): r for r in stats.rows}
        unique_by_venue = {
            int(r["venue_id"]): to_int(r.get("unique_authors")) for r in unique_authors.rows
        }

        subjects_by_venue: dict[int, list[SubjectEntry]] = defaultdict(list)
        for r in subjects.rows:
            subjects_by_venue[int(r["venue_id"])].append(
                SubjectEntry(
                    subject_id=int(r["subject_id"]),
                    term=r.get("term"),
                    score=to_float(r.get("score")),
                    vocabulary=r.get("vocabulary") or None,
                    lang=r.get("lang") or None,
                ),
            )
        for entries in subjects_by_venue.values():
            entries.sort(key=lambda s: -(s.score if s.score is not None else float("-inf")))

        yearly_by_venue: dict[int, list[YearlyStat]] = defaultdict(list)
        for r in yearly.rows:
            yearly_by_venue[int(r["venue_id"])].append(
                YearlyStat(
                    year=to_int(r.get("year"), None),
                    works_count=to_int(r.get("works_count")) or 0,
                    oa_works_count=to_int(r.get("oa_works_count")) or 0,
                    cited_by_count=to_int(r.get("cited_by_count")) or 0,
                ),
            )
        for entries in yearly_by_venue.values():
            entries.sort(key=lambda y: y.year or 0, reverse=True)

        authors_by_venue: dict[int, list[TopAuthor]] = defaultdict(list)
        for r in top_authors.rows:
            authors_by_venue[int(r["venue_id"])].append(
                TopAuthor(
                    person_id=to_int(r.get("person_id"), None),
                    name=compose_name(
                        r.get("preferred_name"),
                        r.get("given_names"),
                        r.get("family_name"),
                    ),
                    works_count=to_int(r.get("works_count")) or 0,
                    best_position=to_int(r.get("best_position"), None),
                    is_corresponding=to_bool(r.get("is_corresponding")),
                ),
            )

        records: dict[int, VenueRecord] = {}
        for row in base.rows:
            record = _record_from_row(row)
            venue_stats = stats_by_venue.get(record.id, {})
            record.metrics = VenueMetrics(
                publications_count=to_int(venue_stats.get("publications_count")) or 0,
                works_count=record.works_count,
                unique_authors=unique_by_venue.get(record.id) or 0,
                first_publication_year=to_int(
                    venue_stats.get("first_publication_year"),
                    None,
                ),
                latest_publication_year=to_int(
                    venue_stats.get("latest_publication_year"),
                    None,
                ),
                open_access_publications=(
                    to_int(venue_stats.get("open_access_publications")) or 0
                ),
                open_access_percentage=to_float(venue_stats.get("open_access_percentage")),
                cited_by_count=to_int(row.get("cited_by_count")) or 0,
                h_index=to_int(row.get("h_index")) or 0,
                i10_index=to_int(row.get("i10_index")) or 0,
            )
            record.subjects = subjects_by_venue.get(record.id, [])
            record.yearly_stats = yearly_by_venue.get(record.id, [])
            record.top_authors = sorted(
                authors_by_venue.get(record.id, []),
                key=_top_author_sort_key,
            )[:TOP_AUTHORS_LIMIT]
            record.publication_summary = _publication_summary(record)
            records[record.id] = record

        warnings = _dedupe(
            base.warnings
            + stats.warnings
            + unique_authors.warnings
            + subjects.warnings
            + yearly.warnings
            + top_authors.warnings,
        )
        if warnings:
            logger.info("Venue enrichment for %d ids with warnings: %s", len(unique_ids), warnings)
        return EnrichmentResult(records=records, warnings=warnings)

    async def list_venues(
        self,
        *,
        venue_type: str | None,
        search: str | None,
        min_id: int | None,
        sort_by: str,
        sort_order: str,
        limit: int,
        offset: int,
    ) -> tuple[list[VenueRecord], int | None, list[str]]:
        conditions: list[str] = []
        params: dict[str, Any] = {}
        if venue_type:
            conditions.append("v.type = :venue_type")
            params["venue_type"] = venue_type
        if search:
            conditions.append(
                "(LOWER(v.name) LIKE :pattern ESCAPE '!'"
                " OR LOWER(v.issn) LIKE :pattern ESCAPE '!'"
                " OR LOWER(v.eissn) LIKE :pattern ESCAPE '!')",
            )
            params["pattern"] = contains_pattern(search)
        if min_id is not None:
            conditions.append("v.id >= :min_id")
            params["min_id"] = min_id
        where_sql = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        direction = "DESC" if sort_order.upper() == "DESC" else "ASC"
        order_sql = f"{venue_sql.SORT_COLUMNS[sort_by]} {direction}, v.id ASC"

        listing, count_rows = await asyncio.gather(
            self._executor.run_variant(
                venue_sql.list_variant(where_sql, order_sql),
                {**params, "limit": limit, "offset": offset},
                timeout_ms=self._aggregate_timeout_ms,
            ),
            self._executor.fetch_all(
                venue_sql.count_sql(where_sql),
                params,
                timeout_ms=self._aggregate_timeout_ms,
                label="venues_count",
            ),
            return_exceptions=True,
        )
        if isinstance(listing, BaseException):
            raise listing
        if listing.used_fallback:
            logger.warning("Venue list fell back to the minimal schema")

        warnings = list(listing.warnings)
        total: int | None
        if isinstance(count_rows, (QueryTimeout, SchemaDrift)):
            logger.warning("Venue count unavailable, total will be estimated: %s", count_rows)
            warnings.append(COUNT_UNAVAILABLE_WARNING)
            total = None
        elif isinstance(count_rows, BaseException):
            raise count_rows
        else:
            total = (to_int(count_rows[0].get("total")) if count_rows else 0) or 0

        records = [_record_from_row(row) for row in listing.rows]
        for record in records:
            record.metrics = VenueMetrics(works_count=record.works_count)
            record.publication_summary = _publication_summary(record)
        return records, total, warnings

    async def recent_works(self, venue_id: int, limit: int = RECENT_WORKS_LIMIT) -> list[RecentWork]:
        works = await self._executor.fetch_all(
            venue_sql.RECENT_WORKS_SQL,
            {"venue_id": venue_id, "limit": limit},
            timeout_ms=self._point_timeout_ms,
            label="recent_works",
        )
        if not works:
            return []

        authors = await self._executor.fetch_all(
            venue_sql.RECENT_WORK_AUTHORS_SQL,
            {"work_ids": [int(w["id"]) for w in works]},
            timeout_ms=self._point_timeout_ms,
            label="recent_work_authors",
        )
        authors_by_work: dict[int, list[RecentWorkAuthor]] = defaultdict(list)
        for a in authors:
            authors_by_work[int(a["work_id"])].append(
                RecentWorkAuthor(
                    person_id=to_int(a.get("person_id"), None),
                    name=compose_name(
                        a.get("preferred_name"),
                        a.get("given_names"),
                        a.get("family_name"),
                    )
                    or "Unknown Author",
                    position=to_int(a.get("position")) or 0,
                    is_corresponding=to_bool(a.get("is_corresponding")),
                ),
            )

        return [
            RecentWork(
                id=int(w["id"]),
                title=w.get("title"),
                subtitle=w.get("subtitle"),
                type=w.get("work_type"),
                language=w.get("language"),
                year=to_int(w.get("year"), None),
                volume=to_str(w.get("volume")),
                issue=to_str(w.get("issue")),
                pages=to_str(w.get("pages")),
                doi=w.get("doi"),
                peer_reviewed=to_bool(w.get("peer_reviewed")),
                publication_date=to_iso(w.get("publication_date")),
                authors=authors_by_work.get(int(w["id"]), []),
            )
            for w in works
        ]
