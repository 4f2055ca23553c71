"""
Venue management endpoints
"""

from typing import Any, List, Optional
import logging
from fastapi import APIRouter, Depends, Query, Request, Response, status
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from venue_api.api.deps import (
    get_city_configs,
    get_event_repository,
    get_venue_repository,
    get_venue_serializer,
)
from venue_api.config import settings
from venue_api.core.city_config import CityConfigRegistry
from venue_api.core.constants import UserRoles
from venue_api.core.exceptions import ConfigNotFoundError, InvalidRequestError, NotFoundError
from venue_api.core.security import CurrentUser, admin_auth, jwt_auth
from venue_api.schemas.event import EventDate, FacebookEventPayload
from venue_api.schemas.venue import ImageUrls, VenueCreate, VenueUpdate
from venue_api.services.event_repository import EventRepository
from venue_api.services.facebook_events import merge_event_dates, serialize_event
from venue_api.services.venue_repository import VenueFilters, VenueRepository, deserialize_sort
from venue_api.services.venue_serialization import VenueSerializer, deserialize_image

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_FIELDS = ["name", "description", "categories", "location", "website", "facebook"]


def _split(values: Optional[List[str]]) -> Optional[List[str]]:
    """Accept both repeated and comma separated query values"""
    if not values:
        return None
    return [item.strip() for value in values for item in value.split(",") if item.strip()]


def _capacity_bounds(city_configs: CityConfigRegistry, lower: float):
    ranges = city_configs.capacity_ranges
    if lower not in ranges:
        raise InvalidRequestError(f"capRange must be one of {list(ranges)}", field="capRange")
    index = ranges.index(lower)
    upper = ranges[index + 1] if index + 1 < len(ranges) else None
    return lower, upper


def _serialize(serializer: VenueSerializer, payload: VenueUpdate, current: Optional[dict] = None) -> dict:
    try:
        return serializer.serialize(payload.to_document(), current)
    except ConfigNotFoundError as e:
        raise InvalidRequestError(e.message, field="location") from e


async def _get_venue_or_404(repository: VenueRepository, venue_id: str) -> dict:
    venue = await repository.get_venue(venue_id)
    if not venue:
        raise NotFoundError("venue_not_found", venue_id)
    return venue


@router.get("/")
async def get_venues(
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    fields: Optional[List[str]] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    ids: Optional[List[str]] = Query(None),
    exclude: Optional[List[str]] = Query(None),
    query: Optional[str] = Query(None, min_length=1),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    city: Optional[str] = None,
    country: Optional[str] = None,
    cat: Optional[str] = None,
    tag: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    has_fb: Optional[bool] = Query(None, alias="hasFb"),
    page_slug: Optional[str] = Query(None, alias="pageSlug"),
    music_type: Optional[str] = Query(None, alias="musicType"),
    visitor_type: Optional[str] = Query(None, alias="visitorType"),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    door_policy: Optional[str] = Query(None, alias="doorPolicy"),
    dresscode: Optional[str] = None,
    cap_range: Optional[float] = Query(None, alias="capRange"),
    price_class: Optional[List[int]] = Query(None, alias="priceClass"),
    no_entrance_fee: bool = Query(False, alias="noEntranceFee"),
    no_coat_check_fee: bool = Query(False, alias="noCoatCheckFee"),
    no_bouncers: bool = Query(False, alias="noBouncers"),
    vip_area: Optional[bool] = Query(None, alias="vipArea"),
    smoking_area: Optional[bool] = Query(None, alias="smokingArea"),
    terrace: Optional[bool] = None,
    terrace_heaters: Optional[bool] = Query(None, alias="terraceHeaters"),
    bouncers: Optional[bool] = None,
    kitchen: Optional[bool] = None,
    coat_check: Optional[bool] = Query(None, alias="coatCheck"),
    parking: Optional[bool] = None,
    cigarettes: Optional[bool] = None,
    accessible: Optional[bool] = None,
    show_hidden: bool = Query(False, alias="showHidden"),
    user: Optional[CurrentUser] = Depends(jwt_auth(required=False)),
    repository: VenueRepository = Depends(get_venue_repository),
    serializer: VenueSerializer = Depends(get_venue_serializer),
    city_configs: CityConfigRegistry = Depends(get_city_configs),
) -> Any:
    """
    List venues with filtering, sorting and pagination
    """
    if show_hidden and not (user and user.check_role(UserRoles.ADMIN)):
        raise InvalidRequestError("showHidden is only available to admins", field="showHidden")

    amenities = {
        "vipArea": vip_area,
        "smokingArea": smoking_area,
        "terrace": terrace,
        "terraceHeaters": terrace_heaters,
        "bouncers": bouncers,
        "kitchen": kitchen,
        "coatCheck": coat_check,
        "parking": parking,
        "cigarettes": cigarettes,
        "accessible": accessible,
    }

    filters = VenueFilters(
        offset=offset,
        limit=limit,
        fields=_split(fields) or DEFAULT_FIELDS,
        sort_by=deserialize_sort(sort_by),
        ids=_split(ids),
        exclude=_split(exclude),
        query=query,
        longitude=longitude,
        latitude=latitude,
        city=city,
        country=country,
        cat=cat,
        tag=tag,
        tags=_split(tags),
        has_fb=has_fb,
        page_slug=page_slug,
        music_type=music_type,
        visitor_type=visitor_type,
        payment_method=payment_method,
        door_policy=door_policy,
        dresscode=dresscode,
        capacity_range=_capacity_bounds(city_configs, cap_range) if cap_range is not None else None,
        price_class=price_class,
        no_entrance_fee=no_entrance_fee,
        no_coat_check_fee=no_coat_check_fee,
        no_bouncers=no_bouncers,
        amenities={name: value for name, value in amenities.items() if value is not None},
        show_hidden=show_hidden,
    )

    results, total_count = await repository.get_venues(filters)

    return {
        "results": [serializer.deserialize(venue) for venue in results],
        "offset": offset,
        "limit": limit,
        "totalCount": total_count,
    }


@router.post("/", status_code=status.HTTP_201_CREATED, dependencies=admin_auth())
async def create_venue(
    payload: VenueCreate,
    repository: VenueRepository = Depends(get_venue_repository),
    serializer: VenueSerializer = Depends(get_venue_serializer),
) -> Any:
    """
    Create a venue
    """
    venue = await repository.create_venue(_serialize(serializer, payload))
    return serializer.deserialize(venue)


@router.get("/{venue_id}")
async def get_venue(
    venue_id: str,
    repository: VenueRepository = Depends(get_venue_repository),
    serializer: VenueSerializer = Depends(get_venue_serializer),
) -> Any:
    """
    Get a single venue
    """
    venue = await _get_venue_or_404(repository, venue_id)
    return serializer.deserialize(venue)


@router.put("/{venue_id}", dependencies=admin_auth())
async def update_venue(
    venue_id: str,
    payload: VenueUpdate,
    repository: VenueRepository = Depends(get_venue_repository),
    serializer: VenueSerializer = Depends(get_venue_serializer),
) -> Any:
    """
    Partially update a venue. Fields left out of the payload keep their
    stored values.
    """
    current = await _get_venue_or_404(repository, venue_id)
    venue = await repository.update_venue(venue_id, _serialize(serializer, payload, current))
    if not venue:
        raise NotFoundError("venue_not_found", venue_id)
    return serializer.deserialize(venue)


@router.delete("/{venue_id}", dependencies=admin_auth())
async def delete_venue(
    venue_id: str,
    repository: VenueRepository = Depends(get_venue_repository),
) -> Any:
    """
    Delete a venue and its images
    """
    await _get_venue_or_404(repository, venue_id)
    await repository.delete_venue(venue_id)
    return {"success": True}


@router.post("/{venue_id}/images", dependencies=admin_auth())
async def upload_venue_images(
    venue_id: str,
    request: Request,
    repository: VenueRepository = Depends(get_venue_repository),
) -> Any:
    """
    Add images to a venue, either as multipart ``images`` files or as a JSON
    body ``{"images": [url, ...]}``
    """
    await _get_venue_or_404(repository, venue_id)

    images = []
    if request.headers.get("content-type", "").startswith("multipart/form-data"):
        form = await request.form()
        files = [f for f in form.getlist("images") if isinstance(f, UploadFile)]
        if not files:
            raise InvalidRequestError("No images uploaded", field="images")
        if len(files) > settings.MAX_IMAGE_UPLOADS:
            raise InvalidRequestError(
                f"At most {settings.MAX_IMAGE_UPLOADS} images per upload", field="images"
            )
        for file in files:
            image = await repository.upload_venue_image(
                venue_id, await file.read(), file.content_type or "application/octet-stream"
            )
            images.append(image)
    else:
        try:
            payload = ImageUrls.model_validate(await request.json())
        except (ValueError, ValidationError) as e:
            raise InvalidRequestError(
                "Expected multipart images or a JSON list of image URLs", field="images"
            ) from e
        for url in payload.images:
            images.append(await repository.upload_venue_image_by_url(venue_id, url))

    return {"results": [deserialize_image(image) for image in images]}


@router.get("/{venue_id}/images/{image_id}")
async def get_venue_image(
    venue_id: str,
    image_id: str,
    repository: VenueRepository = Depends(get_venue_repository),
) -> Response:
    """
    Serve the content of an uploaded venue image
    """
    image = await repository.get_venue_image(venue_id, image_id)
    if not image:
        raise NotFoundError("image_not_found", image_id)
    return Response(content=image.data, media_type=image.mime)


@router.put("/{venue_id}/facebook-events", dependencies=admin_auth())
async def replace_facebook_events(
    venue_id: str,
    events: List[FacebookEventPayload],
    repository: VenueRepository = Depends(get_venue_repository),
    event_repository: EventRepository = Depends(get_event_repository),
) -> Response:
    """
    Replace all current and future Facebook events for a venue
    """
    await _get_venue_or_404(repository, venue_id)

    for event in events:
        facebook_id = event.facebook.id
        existing = await event_repository.get_event_by_fb_id(facebook_id, fields=["dates"])

        dates = event.dates
        dates_changed = False
        if existing:
            existing_dates = [EventDate.model_validate(date) for date in existing.get("dates") or []]
            dates, dates_changed = merge_event_dates(existing_dates, dates)

        data = event.to_document()
        if dates_changed:
            data["facebook"]["datesChanged"] = True
        data.update(
            dates=[date.to_document() for date in dates],
            location={"type": "venue"},
            organiser={"venue": venue_id},
        )

        await event_repository.upsert_event_by_fb_id(facebook_id, serialize_event(data))

    logger.info(f"Imported {len(events)} facebook events for venue {venue_id}")
    return Response(status_code=status.HTTP_200_OK)
