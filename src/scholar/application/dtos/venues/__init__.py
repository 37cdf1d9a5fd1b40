"""Venue enrichment DTOs."""

from scholar.application.dtos.venues.venue_dto import (
    VENUE_DETAIL_ADAPTER,
    VENUE_LIST_ADAPTER,
    EnrichmentOptions,
    EnrichmentResult,
    PublicationSummary,
    PublicationTrendPoint,
    RecentWork,
    RecentWorkAuthor,
    SubjectEntry,
    TopAuthor,
    VenueDetailResult,
    VenueIdentifiers,
    VenueListFilters,
    VenueListResult,
    VenueMetrics,
    VenuePublisher,
    VenueRecord,
    YearlyStat,
)

__all__ = [
    "VENUE_DETAIL_ADAPTER",
    "VENUE_LIST_ADAPTER",
    "EnrichmentOptions",
    "EnrichmentResult",
    "PublicationSummary",
    "PublicationTrendPoint",
    "RecentWork",
    "RecentWorkAuthor",
    "SubjectEntry",
    "TopAuthor",
    "VenueDetailResult",
    "VenueIdentifiers",
    "VenueListFilters",
    "VenueListResult",
    "VenueMetrics",
    "VenuePublisher",
    "VenueRecord",
    "YearlyStat",
]
