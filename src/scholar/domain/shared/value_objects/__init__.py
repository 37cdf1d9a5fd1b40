"""Shared value objects used across domains."""

from scholar.domain.shared.value_objects.pagination import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    Pagination,
    PaginationMeta,
)

__all__ = ["DEFAULT_LIMIT", "MAX_LIMIT", "Pagination", "PaginationMeta"]
