"""List venues with subjects attached."""

from __future__ import annotations

import logging

from scholar.application.dtos.venues import (
    VENUE_LIST_ADAPTER,
    EnrichmentOptions,
    VenueListFilters,
    VenueListResult,
)
from scholar.application.ports.venues import VenueReadPort
from scholar.application.services.cache import CacheAsideService, build_cache_key
from scholar.domain.search import QueryTimeout, SchemaDrift
from scholar.domain.shared.exceptions import ErrorCode, ValidationError
from scholar.domain.shared.value_objects import Pagination, PaginationMeta

logger = logging.getLogger(__name__)

SORT_FIELDS = frozenset({"name", "type", "impact_factor", "works_count", "id"})
SORT_ORDERS = frozenset({"ASC", "DESC"})
LIST_UNAVAILABLE_WARNING = "Venue listing unavailable"
SUBJECTS_UNAVAILABLE_WARNING = "Partial enrichment skipped: subjects unavailable"


def _parse_min_id(raw: object) -> int | None:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        value = int(str(raw).strip()) if not isinstance(raw, bool) else -1
    except ValueError:
        value = -1
    if value < 0:
        msg = "min_id must be a non-negative integer"
        raise ValidationError(msg, ErrorCode.INVALID_FILTER, {"min_id": raw})
    return value


def _dedupe(messages: list[str]) -> list[str]:
    return list(dict.fromkeys(messages))


def _is_cacheable(result: VenueListResult) -> bool:
    return not (result.meta.get("degraded") or result.meta.get("approximate_total"))


class ListVenuesEnrichedQuery:
    """Paginated venue listing with optional type, text and id filters.

    A failed page query gives an empty degraded page. A failed count keeps
    the page and estimates the total as ``offset + len(items)``. Neither is
    cached.
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

    async def execute(self, filters: VenueListFilters | None = None) -> VenueListResult:
        filters = filters or VenueListFilters()
        sort_by = (filters.sort_by or "name").strip().lower()
        sort_order = (filters.sort_order or "ASC").strip().upper()
        if sort_by not in SORT_FIELDS:
            msg = f"Cannot sort venues by '{filters.sort_by}'"
            raise ValidationError(msg, ErrorCode.INVALID_FILTER, {"sort_by": sort_by})
        if sort_order not in SORT_ORDERS:
            msg = "Sort order must be ASC or DESC"
            raise ValidationError(
                msg,
                ErrorCode.INVALID_FILTER,
                {"sort_order": sort_order},
            )
        min_id = _parse_min_id(filters.min_id)

        venue_type = (filters.type or "").strip() or None
        search = (filters.search or "").strip() or None
        window = Pagination.normalize(filters.page, filters.limit, filters.offset)

        key = build_cache_key(
            "venues:list",
            "all",
            {
                "type": venue_type,
                "search": search,
                "min_id": min_id,
                "sort_by": sort_by,
                "sort_order": sort_order,
                "page": window.page,
                "limit": window.limit,
            },
        )

        meta = {
            "source": "database",
            "sort": {"by": sort_by, "order": sort_order},
            "filters": {
                "type": venue_type,
                "search": search,
                "min_id": min_id,
            },
        }

        async def compute() -> VenueListResult:
            try:
                records, total, warnings = await self._venues.list_venues(
                    venue_type=venue_type,
                    search=search,
                    min_id=min_id,
                    sort_by=sort_by,
                    sort_order=sort_order,
                    limit=window.limit,
                    offset=window.offset,
                )
            except (SchemaDrift, QueryTimeout) as e:
                logger.warning("Venue listing failed, returning degraded page: %s", e)
                return VenueListResult(
                    items=[],
                    pagination=PaginationMeta.for_window(window, window.offset),
                    meta={
                        **meta,
                        "degraded": True,
                        "approximate_total": True,
                        "warnings": [LIST_UNAVAILABLE_WARNING],
                    },
                )

            result_meta = dict(meta)
            if total is None:
                total = window.offset + len(records)
                result_meta["approximate_total"] = True

            ids = [record.id for record in records]
            if ids:
                try:
                    enrichment = await self._venues.enrich(
                        ids,
                        EnrichmentOptions(include_subjects=True),
                    )
                except (SchemaDrift, QueryTimeout) as e:
                    logger.warning("Subjects for venue list unavailable: %s", e)
                    warnings = warnings + [SUBJECTS_UNAVAILABLE_WARNING]
                else:
                    warnings = warnings + enrichment.warnings
                    for record in records:
                        enriched = enrichment.records.get(record.id)
                        if enriched is not None:
                            record.subjects = enriched.subjects

            result_meta["warnings"] = _dedupe(warnings)
            return VenueListResult(
                items=records,
                pagination=PaginationMeta.for_window(window, total),
                meta=result_meta,
            )

        return await self._cache.get_or_compute(
            key,
            self._ttl_seconds,
            compute,
            VENUE_LIST_ADAPTER,
            should_cache=_is_cacheable,
        )

