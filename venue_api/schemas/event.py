"""
Event schemas
"""

from pydantic import ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from venue_api.schemas.base import BaseSchema


class EventDate(BaseSchema):
    """One occurrence of an event"""
    model_config = ConfigDict(extra="allow")

    from_: datetime = Field(..., alias="from")
    to: Optional[datetime] = None


class FacebookEventInfo(BaseSchema):
    """Facebook metadata of an imported event"""
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    dates_changed: Optional[bool] = None


class FacebookEventPayload(BaseSchema):
    """Event as delivered by the facebook importer"""
    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "name": "Friday Jazz",
                "description": "Live jazz every friday",
                "dates": [{"from": "2025-10-17T20:00:00Z", "to": "2025-10-17T23:00:00Z"}],
                "facebook": {"id": "1234567890"}
            }
        }
    )

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    dates: List[EventDate] = Field(..., min_length=1)
    facebook: FacebookEventInfo
