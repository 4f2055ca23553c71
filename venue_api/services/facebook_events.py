"""
Merging of facebook event imports into stored events
"""

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from venue_api.schemas.event import EventDate
from venue_api.services.venue_serialization import to_ascii_slug


def _instant(date: EventDate) -> datetime:
    start = date.from_
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    return start


def merge_event_dates(
    existing: List[EventDate], incoming: List[EventDate]
) -> Tuple[List[EventDate], bool]:
    """
    Merge an import's dates into the dates already stored for the event.

    Dates are identified by their start. Stored dates missing from the import
    are kept; the result is sorted by start. The flag tells whether the import
    brought a date that was not stored yet.
    """
    incoming_starts = {_instant(date) for date in incoming}
    existing_starts = {_instant(date) for date in existing}

    kept = [date for date in existing if _instant(date) not in incoming_starts]
    dates_changed = any(_instant(date) not in existing_starts for date in incoming)

    dates = sorted(kept + list(incoming), key=_instant)
    return dates, dates_changed


def serialize_event(data: Dict[str, Any]) -> Dict[str, Any]:
    """Prepare an event for database insertion."""
    doc = copy.deepcopy(data)

    if "id" in doc:
        doc["_id"] = doc.pop("id")

    if not doc.get("queryText") and doc.get("name"):
        doc["queryText"] = to_ascii_slug(doc["name"])

    return doc
