"""
Venue storage on top of the venues document table.

Rows are converted to plain documents (``_id`` plus the stored fields) at
this boundary; nothing above it sees ORM objects.
"""

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from sqlalchemy import Float, Integer, Select, and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from venue_api.models.base import generate_id
from venue_api.models.venue import Venue, VenueImage
from venue_api.services.venue_serialization import to_ascii_slug

logger = logging.getLogger(__name__)

Number = Union[int, float]

AMENITY_FILTERS = (
    "vipArea",
    "smokingArea",
    "terrace",
    "terraceHeaters",
    "bouncers",
    "kitchen",
    "coatCheck",
    "parking",
    "cigarettes",
    "accessible",
)

SORTABLE_FIELDS = ("name", "capacity", "priceClass", "createdAt")


@dataclass
class VenueFilters:
    """Query options for listing venues"""
    offset: int = 0
    limit: int = 20
    fields: Optional[List[str]] = None
    sort_by: List[Tuple[str, int]] = field(default_factory=list)
    ids: Optional[List[str]] = None
    exclude: Optional[List[str]] = None
    query: Optional[str] = None
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    city: Optional[str] = None
    country: Optional[str] = None
    cat: Optional[str] = None
    tag: Optional[str] = None
    tags: Optional[List[str]] = None
    has_fb: Optional[bool] = None
    page_slug: Optional[str] = None
    music_type: Optional[str] = None
    visitor_type: Optional[str] = None
    payment_method: Optional[str] = None
    door_policy: Optional[str] = None
    dresscode: Optional[str] = None
    # (lower, upper] capacity bounds; upper is None for the open-ended bucket
    capacity_range: Optional[Tuple[Number, Optional[Number]]] = None
    price_class: Optional[List[int]] = None
    no_entrance_fee: bool = False
    no_coat_check_fee: bool = False
    no_bouncers: bool = False
    amenities: Dict[str, bool] = field(default_factory=dict)
    show_hidden: bool = False


def deserialize_sort(sort_by: Optional[str]) -> List[Tuple[str, int]]:
    """
    Parse ``"-name,capacity"`` into ``[("name", -1), ("capacity", 1)]``.
    Unknown fields are ignored.
    """
    result = []
    for part in (sort_by or "").split(","):
        part = part.strip()
        if not part:
            continue
        direction = -1 if part.startswith("-") else 1
        name = part.lstrip("+-")
        if name in SORTABLE_FIELDS:
            result.append((name, direction))
    return result


def _is_true(expr):
    return func.coalesce(expr.astext, "false") == "true"


def build_venue_query(filters: VenueFilters) -> Select:
    """
    Build the filtered and ordered venue select, without pagination
    """
    doc = Venue.document
    conditions = []

    if filters.ids:
        conditions.append(Venue.id.in_(filters.ids))
    if filters.exclude:
        conditions.append(Venue.id.notin_(filters.exclude))
    if filters.query:
        conditions.append(doc["queryText"].astext.contains(to_ascii_slug(filters.query), autoescape=True))
    if filters.city:
        conditions.append(func.lower(doc[("location", "city")].astext) == filters.city.lower())
    if filters.country:
        conditions.append(func.lower(doc[("location", "country")].astext) == filters.country.lower())
    if filters.cat:
        conditions.append(doc["categories"].contains([filters.cat]))
    if filters.tag:
        conditions.append(doc["tags"].contains([filters.tag]))
    if filters.tags:
        conditions.append(doc["tags"].contains(list(filters.tags)))
    if filters.has_fb is not None:
        has_fb = doc[("facebook", "id")].astext.isnot(None)
        conditions.append(has_fb if filters.has_fb else ~has_fb)
    if filters.page_slug:
        conditions.append(doc[("facebook", "pageSlug")].astext == filters.page_slug)
    if filters.music_type:
        conditions.append(doc["musicTypes"].contains([filters.music_type]))
    if filters.visitor_type:
        conditions.append(doc["visitorTypes"].contains([filters.visitor_type]))
    if filters.payment_method:
        conditions.append(doc["paymentMethods"].contains([filters.payment_method]))
    if filters.door_policy:
        conditions.append(doc["doorPolicy"].astext == filters.door_policy)
    if filters.dresscode:
        conditions.append(doc["dresscode"].astext == filters.dresscode)
    if filters.capacity_range:
        lower, upper = filters.capacity_range
        capacity = doc["capacity"].astext.cast(Float)
        conditions.append(capacity > lower)
        if upper is not None:
            conditions.append(capacity <= upper)
    if filters.price_class:
        conditions.append(doc["priceClass"].astext.cast(Integer).in_(filters.price_class))
    if filters.no_entrance_fee:
        conditions.append(func.coalesce(doc[("fees", "entrance")].astext.cast(Float), 0) == 0)
    if filters.no_coat_check_fee:
        conditions.append(func.coalesce(doc[("fees", "coatCheck")].astext.cast(Float), 0) == 0)
    if filters.no_bouncers:
        conditions.append(~_is_true(doc[("amenities", "bouncers")]))
    for amenity, wanted in filters.amenities.items():
        flag = _is_true(doc[("amenities", amenity)])
        conditions.append(flag if wanted else ~flag)
    if not filters.show_hidden:
        conditions.append(~_is_true(doc["hidden"]))

    stmt = select(Venue)
    if conditions:
        stmt = stmt.where(and_(*conditions))

    order_by = []
    if filters.longitude is not None and filters.latitude is not None:
        point = ("location", "coordinates", "coordinates")
        longitude = doc[point + ("0",)].astext.cast(Float)
        latitude = doc[point + ("1",)].astext.cast(Float)
        distance = func.power(longitude - filters.longitude, 2) + func.power(latitude - filters.latitude, 2)
        order_by.append(distance.asc().nulls_last())
    for name, direction in filters.sort_by:
        column = Venue.created_at if name == "createdAt" else doc[name]
        order_by.append(column.desc() if direction < 0 else column.asc())
    order_by.append(Venue.id.asc())

    return stmt.order_by(*order_by)


def project(doc: Dict[str, Any], fields: Optional[Sequence[str]]) -> Dict[str, Any]:
    """
    Keep only the requested top-level fields. ``_id`` and ``location`` are
    always kept; computed fields depend on the location.
    """
    if not fields:
        return doc
    keep = set(fields) | {"_id", "location"}
    return {key: value for key, value in doc.items() if key in keep}


class VenueRepository:
    """
    Venue persistence
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def to_document(row: Venue) -> Dict[str, Any]:
        doc = copy.deepcopy(row.document or {})
        doc["_id"] = row.id
        return doc

    async def _get_row(self, venue_id: str) -> Optional[Venue]:
        result = await self.session.execute(select(Venue).where(Venue.id == venue_id))
        return result.scalar_one_or_none()

    async def get_venues(
        self, filters: VenueFilters, include_total: bool = True
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        stmt = build_venue_query(filters)

        total_count = None
        if include_total:
            count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
            total_count = (await self.session.execute(count_stmt)).scalar_one()

        result = await self.session.execute(stmt.offset(filters.offset).limit(filters.limit))
        results = [project(self.to_document(row), filters.fields) for row in result.scalars().all()]
        return results, total_count

    async def get_venue(self, venue_id: str) -> Optional[Dict[str, Any]]:
        row = await self._get_row(venue_id)
        return self.to_document(row) if row else None

    async def create_venue(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        doc = copy.deepcopy(doc)
        venue_id = doc.pop("_id", None) or generate_id()

        row = Venue(id=venue_id, document=doc)
        self.session.add(row)
        await self.session.commit()

        logger.info(f"Venue created: {venue_id}")
        return self.to_document(row)

    async def update_venue(
        self, venue_id: str, doc: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Update a venue. Top-level fields missing from ``doc`` keep their
        stored values.
        """
        row = await self._get_row(venue_id)
        if not row:
            return None

        doc = copy.deepcopy(doc)
        doc.pop("_id", None)
        document = copy.deepcopy(row.document or {})
        document.update(doc)

        # Reassign so the JSONB column is flagged dirty
        row.document = document
        await self.session.commit()

        logger.info(f"Venue updated: {venue_id}")
        return self.to_document(row)

    async def delete_venue(self, venue_id: str) -> bool:
        await self.session.execute(delete(VenueImage).where(VenueImage.venue_id == venue_id))
        result = await self.session.execute(delete(Venue).where(Venue.id == venue_id))
        await self.session.commit()

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Venue deleted: {venue_id}")
        return deleted

    @staticmethod
    def _append_image(row: Venue, image: Dict[str, Any]) -> None:
        document = copy.deepcopy(row.document or {})
        document.setdefault("images", []).append(image)
        row.document = document

    async def upload_venue_image(self, venue_id: str, buffer: bytes, mime: str) -> Optional[Dict[str, Any]]:
        """Store an uploaded image and append it to the venue's images"""
        row = await self._get_row(venue_id)
        if not row:
            return None

        image = {
            "_id": generate_id(),
            "mime": mime,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        self.session.add(VenueImage(id=image["_id"], venue_id=venue_id, mime=mime, data=buffer))
        self._append_image(row, image)
        await self.session.commit()

        logger.info(f"Image {image['_id']} uploaded for venue {venue_id} ({len(buffer)} bytes)")
        return image

    async def upload_venue_image_by_url(self, venue_id: str, url: str) -> Optional[Dict[str, Any]]:
        """Append an image referenced by its source URL"""
        row = await self._get_row(venue_id)
        if not row:
            return None

        image = {
            "_id": generate_id(),
            "url": url,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        self._append_image(row, image)
        await self.session.commit()

        logger.info(f"Image {image['_id']} registered for venue {venue_id} from {url}")
        return image

    async def get_venue_image(self, venue_id: str, image_id: str) -> Optional[VenueImage]:
        result = await self.session.execute(
            select(VenueImage).where(
                VenueImage.id == image_id,
                VenueImage.venue_id == venue_id,
            )
        )
        return result.scalar_one_or_none()
