"""
Venue models
"""

from sqlalchemy import Column, ForeignKey, LargeBinary, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from venue_api.models.base import BaseModel


class Venue(BaseModel):
    """
    Venue document. Everything but the id lives in ``document``.
    """
    __tablename__ = "venues"

    document = Column(JSONB, nullable=False, default=dict)

    # Relationships
    image_blobs = relationship("VenueImage", back_populates="venue", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Venue(id={self.id}, name={(self.document or {}).get('name')})>"


class VenueImage(BaseModel):
    """
    Binary content of an uploaded venue image.
    Image metadata is kept in the owning venue document.
    """
    __tablename__ = "venue_images"

    venue_id = Column(String(64), ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    mime = Column(String(100), nullable=False)
    data = Column(LargeBinary, nullable=False)

    # Relationships
    venue = relationship("Venue", back_populates="image_blobs")

    def __repr__(self):
        return f"<VenueImage(id={self.id}, venue_id={self.venue_id}, mime={self.mime})>"
