"""
Database Seeding Script for the Venue Directory
Creates sample venues and prints an admin token for trying the API
"""

import asyncio
import sys

from venue_api.config import settings
from venue_api.core.city_config import load_city_configs
from venue_api.core.constants import UserRoles
from venue_api.core.database import async_session, close_db, init_db
from venue_api.core.security import create_access_token
from venue_api.schemas.venue import VenueCreate
from venue_api.services.venue_repository import VenueRepository
from venue_api.services.venue_serialization import VenueSerializer


SAMPLE_VENUES = [
    {
        "id": "kaffebaren",
        "name": "Kaffebaren",
        "description": "Small bar with a big terrace by the lakes",
        "categories": ["bar", "cafe"],
        "location": {
            "country": "DK",
            "city": "Copenhagen",
            "address": "Sortedam Dossering 7",
            "coordinates": {"longitude": 12.5646, "latitude": 55.6897}
        },
        "capacity": 80,
        "prices": {"coke": 25, "beer": 45},
        "fees": {"entrance": 0, "coatCheck": 10},
        "amenities": {"terrace": True, "terraceHeaters": True, "bouncers": False},
        "musicTypes": ["jazz", "soul"],
        "paymentMethods": ["card", "mobilepay"],
    },
    {
        "id": "natklubben",
        "name": "Natklubben",
        "description": "Late night club with two dance floors",
        "categories": ["club"],
        "location": {
            "country": "DK",
            "city": "Copenhagen",
            "address": "Vesterbrogade 2",
            "coordinates": {"longitude": 12.5621, "latitude": 55.6738}
        },
        "capacity": 900,
        "prices": {"coke": 35, "beer": 70},
        "fees": {"entrance": 120, "coatCheck": 20},
        "amenities": {"vipArea": True, "bouncers": True, "coatCheck": True},
        "musicTypes": ["house", "techno"],
        "doorPolicy": "21+",
        "dresscode": "smart casual",
    },
    {
        "id": "aarhus-bodega",
        "name": "Bodega Ålen",
        "categories": ["bar"],
        "location": {
            "country": "DK",
            "city": "Aarhus",
            "address": "Åboulevarden 10",
            "coordinates": {"longitude": 10.2094, "latitude": 56.1565}
        },
        "capacity": 45,
        "prices": {"coke": 15, "beer": 28},
        "amenities": {"smokingArea": True, "cigarettes": True},
    },
    {
        "id": "berlin-keller",
        "name": "Kellerbar Süd",
        "categories": ["bar", "live music"],
        "location": {
            "country": "DE",
            "city": "Berlin",
            "address": "Oranienstraße 25",
            "coordinates": {"longitude": 13.4226, "latitude": 52.5010}
        },
        "capacity": 150,
        "prices": {"coke": 3, "beer": 4},
        "fees": {"entrance": 8},
        "amenities": {"accessible": False, "kitchen": True},
        "visitorTypes": ["students", "locals"],
    },
]


async def create_venues(repository: VenueRepository, serializer: VenueSerializer):
    """Create sample venues, skipping the ones already stored"""
    created = 0
    for data in SAMPLE_VENUES:
        if await repository.get_venue(data["id"]):
            print(f"  [SKIP] {data['name']} already exists")
            continue

        payload = VenueCreate.model_validate(data)
        await repository.create_venue(serializer.serialize(payload.to_document()))
        created += 1
        print(f"  [OK] {data['name']}")

    return created


async def seed_database():
    """Main seeding function"""
    print(">> Seeding venue directory...")

    city_configs = load_city_configs(settings.CITY_CONFIG_PATH)
    serializer = VenueSerializer(city_configs)

    await init_db()
    try:
        async with async_session() as session:
            created = await create_venues(VenueRepository(session), serializer)
    finally:
        await close_db()

    print(f"\n[OK] Database seeding completed, {created} venues created")
    print("\n>> Admin token (for write endpoints):")
    print(f"  {create_access_token('seed-admin', roles=[UserRoles.ADMIN])}")


if __name__ == "__main__":
    try:
        asyncio.run(seed_database())
    except Exception as e:
        print(f"\n[ERROR] Error during seeding: {e}")
        sys.exit(1)
