"""SQLAlchemy venue adapters (read side).

These are infrastructure implementations of application-layer venue ports.
"""

from scholar.infrastructure.persistence.sqlalchemy.adapters.venues.sqlalchemy_venue_read_adapter import (  # NOQA: E501
    SqlAlchemyVenueReadAdapter,
)

__all__ = ["SqlAlchemyVenueReadAdapter"]
