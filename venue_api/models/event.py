"""
Event model
"""

from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import JSONB

from venue_api.models.base import BaseModel


class Event(BaseModel):
    """
    Event document. ``facebook_id`` mirrors ``document.facebook.id`` so
    imports can be upserted by it.
    """
    __tablename__ = "events"

    facebook_id = Column(String(64), unique=True, index=True)
    document = Column(JSONB, nullable=False, default=dict)

    def __repr__(self):
        return f"<Event(id={self.id}, facebook_id={self.facebook_id})>"
