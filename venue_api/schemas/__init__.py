"""
Pydantic schemas for request and response validation
"""

from venue_api.schemas.venue import (
    VenueCreate,
    VenueUpdate,
    ImageUrls,
)
from venue_api.schemas.event import (
    EventDate,
    FacebookEventPayload,
)
from venue_api.schemas.response import (
    ErrorResponse,
)

__all__ = [
    "VenueCreate",
    "VenueUpdate",
    "ImageUrls",
    "EventDate",
    "FacebookEventPayload",
    "ErrorResponse",
]
