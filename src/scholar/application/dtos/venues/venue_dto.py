"""Venue enrichment DTOs.

A venue record is assembled from several independent queries. Every optional
collection defaults to empty so a record stays well-formed when one of its
sources is missing from the schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter

from scholar.domain.shared.value_objects import PaginationMeta


@dataclass(frozen=True)
class EnrichmentOptions:
    """Which optional dimensions to load for a venue."""

    include_subjects: bool = False
    include_yearly: bool = False
    include_top_authors: bool = False
    include_unique_authors: bool = False


@dataclass
class SubjectEntry:
    subject_id: int
    term: str | None
    score: float | None
    vocabulary: str | None = None
    lang: str | None = None


@dataclass
class YearlyStat:
    year: int | None
    works_count: int = 0
    oa_works_count: int = 0
    cited_by_count: int = 0


@dataclass
class TopAuthor:
    person_id: int | None
    name: str | None
    works_count: int
    best_position: int | None
    is_corresponding: bool | None


@dataclass
class VenueMetrics:
    publications_count: int = 0
    works_count: int = 0
    unique_authors: int = 0
    first_publication_year: int | None = None
    latest_publication_year: int | None = None
    open_access_publications: int = 0
    open_access_percentage: float | None = None
    cited_by_count: int = 0
    h_index: int = 0
    i10_index: int = 0


@dataclass
class VenueIdentifiers:
    issn: str | None = None
    eissn: str | None = None
    scopus_source_id: str | None = None
    external: dict[str, str] = field(default_factory=dict)


@dataclass
class VenuePublisher:
    id: int | None = None
    name: str | None = None
    type: str | None = None
    country_code: str | None = None


@dataclass
class PublicationTrendPoint:
    year: int | None
    works_count: int
    oa_works_count: int


@dataclass
class PublicationSummary:
    first_publication_year: int | None = None
    latest_publication_year: int | None = None
    publication_trend: list[PublicationTrendPoint] = field(default_factory=list)


@dataclass
class VenueRecord:
    """Composite venue view."""

    id: int
    name: str | None
    type: str | None = None
    issn: str | None = None
    eissn: str | None = None
    impact_factor: float | None = None
    citescore: float | None = None
    sjr: float | None = None
    snip: float | None = None
    two_year_mean_citedness: float | None = None
    open_access: bool | None = None
    aggregation_type: str | None = None
    coverage_start_year: int | None = None
    coverage_end_year: int | None = None
    homepage_url: str | None = None
    country_code: str | None = None
    is_in_doaj: bool | None = None
    is_indexed_in_scopus: bool | None = None
    validation_status: str | None = None
    works_count: int = 0
    created_at: str | None = None
    updated_at: str | None = None
    identifiers: VenueIdentifiers = field(default_factory=VenueIdentifiers)
    publisher: VenuePublisher = field(default_factory=VenuePublisher)
    metrics: VenueMetrics = field(default_factory=VenueMetrics)
    subjects: list[SubjectEntry] = field(default_factory=list)
    yearly_stats: list[YearlyStat] = field(default_factory=list)
    top_authors: list[TopAuthor] = field(default_factory=list)
    publication_summary: PublicationSummary = field(
        default_factory=PublicationSummary,
    )


@dataclass
class EnrichmentResult:
    """Records keyed by venue id plus deduplicated warnings."""

    records: dict[int, VenueRecord] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


@dataclass
class RecentWorkAuthor:
    person_id: int | None
    name: str
    position: int
    is_corresponding: bool | None


@dataclass
class RecentWork:
    id: int
    title: str | None
    subtitle: str | None = None
    type: str | None = None
    language: str | None = None
    year: int | None = None
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    doi: str | None = None
    peer_reviewed: bool | None = None
    publication_date: str | None = None
    authors: list[RecentWorkAuthor] = field(default_factory=list)


@dataclass
class VenueDetailResult:
    venue: VenueRecord | None
    recent_works: list[RecentWork] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return VENUE_DETAIL_ADAPTER.dump_python(self, mode="json")


@dataclass
class VenueListFilters:
    """Raw list filters; validated by ``ListVenuesEnrichedQuery``."""

    type: str | None = None
    search: str | None = None
    min_id: Any = None
    sort_by: str = "name"
    sort_order: str = "ASC"
    page: Any = None
    limit: Any = None
    offset: Any = None


@dataclass
class VenueListResult:
    items: list[VenueRecord]
    pagination: PaginationMeta
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return VENUE_LIST_ADAPTER.dump_python(self, mode="json")


VENUE_DETAIL_ADAPTER: TypeAdapter[VenueDetailResult | None] = TypeAdapter(
    VenueDetailResult | None,
)
VENUE_LIST_ADAPTER: TypeAdapter[VenueListResult] = TypeAdapter(VenueListResult)
