"""Search queries over works and persons."""

from scholar.application.queries.search.global_search_query import (
    GlobalSearchQuery,
)
from scholar.application.queries.search.search_entities_query import (
    SearchPersonsQuery,
    SearchWorksQuery,
)

__all__ = ["GlobalSearchQuery", "SearchPersonsQuery", "SearchWorksQuery"]
