"""SQLAlchemy entity stores used by the search orchestrator."""

from scholar.infrastructure.persistence.sqlalchemy.adapters.search.sqlalchemy_person_store_adapter import (  # NOQA: E501
    SqlAlchemyPersonStoreAdapter,
)
from scholar.infrastructure.persistence.sqlalchemy.adapters.search.sqlalchemy_work_store_adapter import (  # NOQA: E501
    SqlAlchemyWorkStoreAdapter,
)

__all__ = ["SqlAlchemyPersonStoreAdapter", "SqlAlchemyWorkStoreAdapter"]
