"""
Shared endpoint dependencies
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from venue_api.core.city_config import CityConfigRegistry
from venue_api.core.database import get_session
from venue_api.services.event_repository import EventRepository
from venue_api.services.venue_repository import VenueRepository
from venue_api.services.venue_serialization import VenueSerializer


def get_city_configs(request: Request) -> CityConfigRegistry:
    return request.app.state.city_configs


def get_venue_serializer(
    city_configs: CityConfigRegistry = Depends(get_city_configs),
) -> VenueSerializer:
    return VenueSerializer(city_configs)


def get_venue_repository(db: AsyncSession = Depends(get_session)) -> VenueRepository:
    return VenueRepository(db)


def get_event_repository(db: AsyncSession = Depends(get_session)) -> EventRepository:
    return EventRepository(db)
