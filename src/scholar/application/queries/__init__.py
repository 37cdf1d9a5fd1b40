"""Caller-facing read operations."""

from scholar.application.queries.search import (
    GlobalSearchQuery,
    SearchPersonsQuery,
    SearchWorksQuery,
)
from scholar.application.queries.venues import (
    GetVenueEnrichedQuery,
    ListVenuesEnrichedQuery,
)

__all__ = [
    "GetVenueEnrichedQuery",
    "GlobalSearchQuery",
    "ListVenuesEnrichedQuery",
    "SearchPersonsQuery",
    "SearchWorksQuery",
]
