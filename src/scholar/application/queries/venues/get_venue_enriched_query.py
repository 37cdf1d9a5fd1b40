"""Fetch a single venue with its enrichment dimensions."""

from __future__ import annotations

import logging
from typing import Any

from scholar.application.dtos.venues import (
    VENUE_DETAIL_ADAPTER,
    EnrichmentOptions,
    RecentWork,
    VenueDetailResult,
)
from scholar.application.ports.venues import VenueReadPort
from scholar.application.services.cache import CacheAsideService, build_cache_key
from scholar.domain.search import QueryTimeout, SchemaDrift
from scholar.domain.shared.exceptions import ErrorCode, ValidationError

logger = logging.getLogger(__name__)

RECENT_WORKS_WARNING = "Partial enrichment skipped: recent_works unavailable"
BASE_UNAVAILABLE_WARNING = "Venue record unavailable"


def parse_venue_id(raw: Any) -> int:
    """Accept positive ints and numeric strings."""
    if isinstance(raw, bool):
        raw = None
    try:
        venue_id = int(str(raw).strip())
    except ValueError:
        venue_id = 0
    if venue_id <= 0:
        msg = "Venue id must be a positive integer"
        raise ValidationError(msg, ErrorCode.INVALID_IDENTIFIER, {"id": raw})
    return venue_id


def _is_cacheable(result: VenueDetailResult | None) -> bool:
    return result is not None and not result.meta.get("degraded")


class GetVenueEnrichedQuery:
    """Return a composite venue view or None when the venue does not exist.

    A timeout or schema drift on the base query yields a result with
    ``venue=None`` and ``meta.degraded`` set. Such results are not cached.
    """

    def __init__(
        self,
        venue_read_port: VenueReadPort,
        cache: CacheAsideService,
        ttl_seconds: int = 7200,
    ):
        self._venues = venue_read_port
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    async def execute(
        self,
        venue_id: Any,
        include_subjects: bool = True,
        include_yearly: bool = True,
        include_top_authors: bool = True,
        include_recent_works: bool = True,
    ) -> VenueDetailResult | None:
        parsed_id = parse_venue_id(venue_id)
        options = EnrichmentOptions(
            include_subjects=include_subjects,
            include_yearly=include_yearly,
            include_top_authors=include_top_authors,
            include_unique_authors=True,
        )
        key = build_cache_key(
            "venues:detail",
            parsed_id,
            {
                "subjects": include_subjects,
                "yearly": include_yearly,
                "top_authors": include_top_authors,
                "recent_works": include_recent_works,
            },
        )
        return await self._cache.get_or_compute(
            key,
            self._ttl_seconds,
            lambda: self._load(parsed_id, options, include_recent_works),
            VENUE_DETAIL_ADAPTER,
            should_cache=_is_cacheable,
        )

    async def _load(
        self,
        venue_id: int,
        options: EnrichmentOptions,
        include_recent_works: bool,
    ) -> VenueDetailResult | None:
        try:
            enrichment = await self._venues.enrich([venue_id], options)
        except (SchemaDrift, QueryTimeout) as e:
            logger.warning("Venue %d base record unavailable: %s", venue_id, e)
            return VenueDetailResult(
                venue=None,
                meta={
                    "source": "database",
                    "degraded": True,
                    "warnings": [BASE_UNAVAILABLE_WARNING],
                },
            )
        record = enrichment.records.get(venue_id)
        if record is None:
            return None

        warnings = list(enrichment.warnings)

        recent_works: list[RecentWork] = []
        if include_recent_works:
            try:
                recent_works = await self._venues.recent_works(venue_id)
            except (SchemaDrift, QueryTimeout) as e:
                logger.warning("Recent works for venue %d unavailable: %s", venue_id, e)
                warnings.append(RECENT_WORKS_WARNING)

        return VenueDetailResult(
            venue=record,
            recent_works=recent_works,
            meta={"source": "database", "warnings": warnings},
        )
