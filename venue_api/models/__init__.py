"""
Database models
"""

from venue_api.models.venue import Venue, VenueImage
from venue_api.models.event import Event

__all__ = [
    "Venue",
    "VenueImage",
    "Event",
]
