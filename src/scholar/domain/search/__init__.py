"""Search domain: request value objects and backend exceptions."""

from scholar.domain.search.exceptions import (
    IndexUnavailable,
    QueryError,
    QueryTimeout,
    SchemaDrift,
    SearchBackendError,
    StoreUnavailable,
)
from scholar.domain.search.value_objects import (
    ALLOWED_FILTERS,
    MAX_QUERY_LENGTH,
    MIN_INDEX_QUERY_LENGTH,
    EntityKind,
    FilterValue,
    SearchEngine,
    SearchRequest,
)

__all__ = [
    "ALLOWED_FILTERS",
    "MAX_QUERY_LENGTH",
    "MIN_INDEX_QUERY_LENGTH",
    "EntityKind",
    "FilterValue",
    "IndexUnavailable",
    "QueryError",
    "QueryTimeout",
    "SchemaDrift",
    "SearchBackendError",
    "SearchEngine",
    "SearchRequest",
    "StoreUnavailable",
]
