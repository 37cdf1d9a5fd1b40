"""Integration adapters for external services."""

from scholar.infrastructure.integration.search_index import (
    SearchIndexAdapter,
    SearchIndexClient,
)

__all__ = [
    "SearchIndexAdapter",
    "SearchIndexClient",
]
