from scholar.application.ports.venues.venue_read_port import VenueReadPort

__all__ = ["VenueReadPort"]
