"""
SprintSpace Backend — Event Service (Event Resource Handler)
==============================================================

What:  Business logic for events: paginated listing, lookup, the
       running-events view, and owner-only create/update/delete.
Who:   Called by routes/events.py; receives a per-request AsyncSession.

Authorization rule:
    Update and delete compare the authenticated identity with the RECORD's
    owner_email. A caller can only modify events they created.

Error Handling Strategy:
    Identifier format is checked before any query (ValidationError → 400).
    Our own exceptions propagate as-is; SQLAlchemy failures are wrapped in
    DatabaseError (generic 500, details logged).
"""

import logging
import math
import random
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sprintspace.exceptions import DatabaseError, ForbiddenError, NotFoundError
from sprintspace.identifiers import check_object_id
from sprintspace.models.event import Event
from sprintspace.schemas.common import DeleteResult
from sprintspace.schemas.event import (
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
    RunningEventsResponse,
)
from sprintspace.services.auth_service import Identity

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def event_to_response(event: Event) -> EventResponse:
    """Flatten attributes and columns into one response object."""
    data = dict(event.attributes or {})
    data.update(
        id=event.id,
        userEmail=event.owner_email,
        title=event.title,
        startDate=event.start_date,
        createdAt=event.created_at,
        totalRegistrationCount=event.total_registration_count,
    )
    return EventResponse.model_validate(data)


class EventService:
    """
    Responsibilities:
        - list_events(): one page + totals for pagination
        - get_event(): single event, 404 when absent
        - running_events(): events starting after today + random sample
        - create_event() / update_event() / delete_event(): owner-only writes
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    async def list_events(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 9,
        email: Optional[str] = None,
        sort: str = "desc",
        my_events_limit: int = 1000,
    ) -> EventListResponse:
        """
        Return page `page` of `limit` events.

        myEvents holds every event matching the same filter, unpaginated but
        capped at `my_events_limit` rows.

        Example: 20 events, page=2, limit=9 → 9 events, totalPages=3.
        """
        try:
            filters = []
            if email:
                filters.append(Event.owner_email == email)

            order = asc if sort == "asc" else desc
            matching = (
                select(Event)
                .where(*filters)
                .order_by(order(Event.created_at), order(Event.id))
            )
            result = await db.execute(matching.offset((page - 1) * limit).limit(limit))
            events = list(result.scalars().all())

            all_result = await db.execute(matching.limit(my_events_limit))
            my_events = list(all_result.scalars().all())

            count_result = await db.execute(
                select(func.count()).select_from(Event).where(*filters)
            )
            total = count_result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing events: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve events. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return EventListResponse(
            my_events=[event_to_response(event) for event in my_events],
            events=[event_to_response(event) for event in events],
            total_events=total,
            total_pages=math.ceil(total / limit),
            current_page=page,
        )

    async def get_event(self, db: AsyncSession, event_id: str) -> EventResponse:
        event_id = check_object_id(event_id, "event")
        event = await self._fetch(db, event_id)
        if event is None:
            raise NotFoundError(resource="event", resource_id=event_id)
        return event_to_response(event)

    async def running_events(
        self,
        db: AsyncSession,
        limit: int = 6,
        sample_size: int = 3,
        today: Optional[date] = None,
    ) -> RunningEventsResponse:
        """
        Events whose start date is strictly after `today`, soonest first.

        randomRunningEvents is a uniform sample of at most `sample_size`
        events drawn from that same list.
        """
        today = today or utc_today()
        try:
            result = await db.execute(
                select(Event)
                .where(Event.start_date > today)
                .order_by(asc(Event.start_date), asc(Event.id))
                .limit(limit)
            )
            upcoming: List[Event] = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing running events: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve running events. Please try again.",
                context={"error_type": type(e).__name__},
            )

        sample = self._rng.sample(upcoming, min(sample_size, len(upcoming)))
        return RunningEventsResponse(
            marathons=[event_to_response(event) for event in upcoming],
            random_running_events=[event_to_response(event) for event in sample],
        )

    async def create_event(
        self, db: AsyncSession, payload: EventCreate, identity: Identity
    ) -> EventResponse:
        event = Event(
            owner_email=identity.email,
            title=payload.title,
            start_date=payload.start_date,
            attributes=payload.extra_attributes(),
            total_registration_count=0,
        )
        try:
            db.add(event)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating event: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the event. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Event %s created by %s", event.id, identity.email)
        return event_to_response(event)

    async def update_event(
        self,
        db: AsyncSession,
        event_id: str,
        payload: EventUpdate,
        identity: Identity,
    ) -> EventResponse:
        """Partial update: known fields replaced, extra attributes merged."""
        event = await self._fetch_owned(db, event_id, identity)

        fields_set = payload.model_fields_set
        if "title" in fields_set and payload.title is not None:
            event.title = payload.title
        if "start_date" in fields_set:
            event.start_date = payload.start_date
        extras = payload.extra_attributes()
        if extras:
            event.attributes = {**(event.attributes or {}), **extras}

        try:
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating event %s: %s", event.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the event. Please try again.",
                context={"event_id": event.id},
            )

        logger.info("Event %s updated by %s", event.id, identity.email)
        return event_to_response(event)

    async def delete_event(
        self, db: AsyncSession, event_id: str, identity: Identity
    ) -> DeleteResult:
        """Delete an owned event. Its registrations are left in place."""
        event = await self._fetch_owned(db, event_id, identity)
        try:
            await db.delete(event)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting event %s: %s", event.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the event. Please try again.",
                context={"event_id": event.id},
            )

        logger.info("Event %s deleted by %s", event.id, identity.email)
        return DeleteResult(deleted_count=1)

    async def _fetch(self, db: AsyncSession, event_id: str) -> Optional[Event]:
        try:
            return await db.get(Event, event_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching event %s: %s", event_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the event. Please try again.",
                context={"event_id": event_id},
            )

    async def _fetch_owned(
        self, db: AsyncSession, event_id: str, identity: Identity
    ) -> Event:
        event_id = check_object_id(event_id, "event")
        event = await self._fetch(db, event_id)
        if event is None:
            raise NotFoundError(resource="event", resource_id=event_id)
        if event.owner_email != identity.email:
            logger.warning(
                "%s attempted to modify event %s owned by %s",
                identity.email,
                event_id,
                event.owner_email,
            )
            raise ForbiddenError(context={"event_id": event_id})
        return event


event_service = EventService()
