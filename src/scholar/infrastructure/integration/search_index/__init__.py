"""Full-text search index integration."""

from scholar.infrastructure.integration.search_index.adapter import (
    SearchIndexAdapter,
)
from scholar.infrastructure.integration.search_index.client import (
    SearchIndexClient,
)

__all__ = [
    "SearchIndexAdapter",
    "SearchIndexClient",
]
