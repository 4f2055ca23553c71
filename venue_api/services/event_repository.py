"""
Event storage on top of the events document table
"""

import copy
import logging
from typing import Any, Dict, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from venue_api.models.base import generate_id
from venue_api.models.event import Event
from venue_api.services.venue_repository import project

logger = logging.getLogger(__name__)


class EventRepository:
    """
    Event persistence
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def to_document(row: Event) -> Dict[str, Any]:
        doc = copy.deepcopy(row.document or {})
        doc["_id"] = row.id
        return doc

    async def _get_row_by_fb_id(self, facebook_id: str) -> Optional[Event]:
        result = await self.session.execute(select(Event).where(Event.facebook_id == facebook_id))
        return result.scalar_one_or_none()

    async def get_event_by_fb_id(
        self, facebook_id: str, fields: Optional[Sequence[str]] = None
    ) -> Optional[Dict[str, Any]]:
        row = await self._get_row_by_fb_id(facebook_id)
        if not row:
            return None
        return project(self.to_document(row), fields)

    async def upsert_event_by_fb_id(self, facebook_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        """
        Set the given fields on the event with this facebook id, creating
        the event when there is none.
        """
        doc = copy.deepcopy(doc)
        doc.pop("_id", None)

        row = await self._get_row_by_fb_id(facebook_id)
        if row:
            document = copy.deepcopy(row.document or {})
            document.update(doc)
            row.document = document
            logger.info(f"Event {row.id} updated from facebook event {facebook_id}")
        else:
            row = Event(id=generate_id(), facebook_id=facebook_id, document=doc)
            self.session.add(row)
            logger.info(f"Event {row.id} created from facebook event {facebook_id}")

        await self.session.commit()
        return self.to_document(row)
