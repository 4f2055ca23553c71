"""
Venue schemas for request validation
"""

from typing import Dict, List, Optional
from pydantic import ConfigDict, Field, field_validator

from venue_api.schemas.base import BaseSchema


class Coordinates(BaseSchema):
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)


class Location(BaseSchema):
    country: str = Field(..., min_length=2, max_length=2)
    city: str = Field(..., min_length=1, max_length=100)
    address: Optional[str] = Field(None, max_length=500)
    postal_code: Optional[str] = Field(None, max_length=20)
    coordinates: Optional[Coordinates] = None


class FacebookInfo(BaseSchema):
    id: Optional[str] = None
    page_slug: Optional[str] = None


class Prices(BaseSchema):
    coke: Optional[float] = Field(None, ge=0)
    beer: Optional[float] = Field(None, ge=0)


class Fees(BaseSchema):
    entrance: Optional[float] = Field(None, ge=0)
    coat_check: Optional[float] = Field(None, ge=0)


class VenueUpdate(BaseSchema):
    """Partial venue update; fields left out are not touched"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    categories: Optional[List[str]] = None
    location: Optional[Location] = None
    website: Optional[str] = Field(None, max_length=2048)
    facebook: Optional[FacebookInfo] = None
    instagram: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    prices: Optional[Prices] = None
    fees: Optional[Fees] = None
    amenities: Optional[Dict[str, bool]] = None
    music_types: Optional[List[str]] = None
    visitor_types: Optional[List[str]] = None
    payment_methods: Optional[List[str]] = None
    door_policy: Optional[str] = None
    dresscode: Optional[str] = None
    tags: Optional[List[str]] = None
    hidden: Optional[bool] = None
    source_id: Optional[str] = None
    query_text: Optional[str] = None

    @field_validator("name", "location")
    @classmethod
    def validate_not_null(cls, v):
        # May be left out of an update, but never cleared
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class VenueCreate(VenueUpdate):
    id: Optional[str] = Field(None, min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    location: Location

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Café Øl",
                "description": "Cosy corner bar",
                "categories": ["bar"],
                "location": {
                    "country": "DK",
                    "city": "Copenhagen",
                    "address": "Nørrebrogade 1",
                    "coordinates": {"longitude": 12.55, "latitude": 55.69}
                },
                "capacity": 120,
                "prices": {"coke": 25, "beer": 45},
                "fees": {"entrance": 60}
            }
        }
    )


class ImageUrls(BaseSchema):
    images: List[str] = Field(..., min_length=1)
