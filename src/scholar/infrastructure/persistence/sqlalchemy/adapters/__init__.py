"""SQLAlchemy adapters - implementations of application ports."""

from scholar.infrastructure.persistence.sqlalchemy.adapters.search import (
    SqlAlchemyPersonStoreAdapter,
    SqlAlchemyWorkStoreAdapter,
)
from scholar.infrastructure.persistence.sqlalchemy.adapters.venues import (
    SqlAlchemyVenueReadAdapter,
)

__all__ = [
    "SqlAlchemyPersonStoreAdapter",
    "SqlAlchemyVenueReadAdapter",
    "SqlAlchemyWorkStoreAdapter",
]
