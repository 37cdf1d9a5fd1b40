"""Venue read port (report-like interface)."""

from __future__ import annotations

from typing import Protocol

from scholar.application.dtos.venues import (
    EnrichmentOptions,
    EnrichmentResult,
    RecentWork,
    VenueRecord,
)


class VenueReadPort(Protocol):
    """Composite venue views built from several relational queries."""

    async def enrich(
        self,
        venue_ids: list[int],
        options: EnrichmentOptions,
    ) -> EnrichmentResult:
        """Load base rows and the requested optional dimensions.

        Venues without a base row are absent from ``records``. Optional
        dimensions that fail on schema differences come back empty with a
        warning instead of raising.
        """
        ...

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
        """One page of venues, the total count and any warnings.

        The total is None when the count query timed out or drifted. A
        failure of the page query itself is raised.
        """
        ...

    async def recent_works(self, venue_id: int, limit: int = 10) -> list[RecentWork]:
        """Latest publications in a venue with their ordered authors."""
        ...
