"""
Conversion between client-facing venue JSON and stored venue documents.

Stored documents use ``_id`` and encode coordinates as a GeoJSON point.
Client documents use ``id``, plain ``{longitude, latitude}`` coordinates and
carry display fields computed from the city configuration.
"""

import copy
from typing import Any, Dict, Optional

from unidecode import unidecode

from venue_api.core.city_config import CityConfig, CityConfigRegistry
from venue_api.core.constants import PRICE_CLASS_CATEGORIES
from venue_api.services.ranges import get_range, get_range_index

INTERNAL_ONLY_FIELDS = ("_id", "sourceId", "queryText")


def to_ascii_slug(text: str) -> str:
    """Accent-insensitive search form of ``text``."""
    return unidecode(text).lower()


def _rename_id(doc: Dict[str, Any]) -> Dict[str, Any]:
    if "_id" in doc:
        doc["id"] = doc.pop("_id")
    return doc


def deserialize_image(image: Dict[str, Any]) -> Dict[str, Any]:
    """Prepare a venue image to be sent to a client."""
    return _rename_id(copy.deepcopy(image))


def get_price_class(prices: Dict[str, Any], city_config: CityConfig) -> Optional[int]:
    """
    Highest price class over the beverages that have a price.

    A beverage without a price does not take part; with no priced beverage
    the venue has no price class.
    """
    classes = []
    for category in PRICE_CLASS_CATEGORIES:
        ranges = getattr(city_config.price_class_ranges, category)
        index = get_range_index(ranges, prices.get(category))
        if index is not None:
            classes.append(index)

    return max(classes) if classes else None


class VenueSerializer:
    """
    Serializes venues for storage and deserializes them for clients
    """

    def __init__(self, city_configs: CityConfigRegistry):
        self.city_configs = city_configs

    def serialize(
        self, data: Dict[str, Any], current: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Prepare a create or partial-update payload for storage.

        Only keys present in ``data`` end up in the result, apart from
        ``priceClass`` and ``queryText`` which are derived when their inputs
        are present. For an update, ``current`` is the stored venue; its
        location and prices stand in for the ones the payload leaves out so
        ``priceClass`` follows either change.
        """
        doc = copy.deepcopy(data)
        current = current or {}

        if "id" in doc:
            doc["_id"] = doc.pop("id")

        location = doc.get("location") or {}

        city_config = None
        if location.get("country") and location.get("city"):
            city_config = self.city_configs.get(location["country"], location["city"])
        elif "prices" in doc:
            stored_location = current.get("location") or {}
            city_config = self.city_configs.find(
                stored_location.get("country"), stored_location.get("city")
            )

        prices = doc["prices"] if "prices" in doc else current.get("prices")
        if prices is not None and city_config:
            doc["priceClass"] = get_price_class(prices, city_config)

        coordinates = location.get("coordinates")
        if coordinates:
            location["coordinates"] = {
                "type": "Point",
                "coordinates": [coordinates["longitude"], coordinates["latitude"]],
            }

        if not doc.get("queryText") and doc.get("name"):
            doc["queryText"] = to_ascii_slug(doc["name"])

        return doc

    def deserialize(self, venue: Dict[str, Any]) -> Dict[str, Any]:
        """Prepare a stored venue to be sent to a client."""
        venue = copy.deepcopy(venue)

        _rename_id(venue)
        for field in INTERNAL_ONLY_FIELDS:
            venue.pop(field, None)

        if venue.get("images"):
            venue["images"] = [deserialize_image(image) for image in venue["images"]]

        location = venue.get("location")
        city_config = None
        if location:
            point = location.get("coordinates")
            if point:
                longitude, latitude = point["coordinates"]
                location["coordinates"] = {"longitude": longitude, "latitude": latitude}
            city_config = self.city_configs.get(location.get("country"), location.get("city"))

        # Computed fields
        if venue.get("capacity"):
            venue["capacityRange"] = get_range(self.city_configs.capacity_ranges, venue["capacity"])

        fees = venue.get("fees")
        if fees and city_config:
            venue["currency"] = city_config.currency
            if fees.get("entrance"):
                venue["entranceFeeRange"] = get_range(
                    city_config.entrance_fee_ranges, fees["entrance"]
                )

        return venue
