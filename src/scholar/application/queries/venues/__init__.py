"""Venue queries."""

from scholar.application.queries.venues.get_venue_enriched_query import (
    GetVenueEnrichedQuery,
)
from scholar.application.queries.venues.list_venues_enriched_query import (
    ListVenuesEnrichedQuery,
)

__all__ = ["GetVenueEnrichedQuery", "ListVenuesEnrichedQuery"]
