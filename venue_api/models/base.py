"""
Base model class with common fields
"""

from sqlalchemy import Column, DateTime, String, func
import uuid

from venue_api.core.database import Base


def generate_id() -> str:
    return uuid.uuid4().hex


class BaseModel(Base):
    """
    Abstract base model with common fields
    """
    __abstract__ = True

    id = Column(
        String(64),
        primary_key=True,
        default=generate_id,
        nullable=False
    )
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
