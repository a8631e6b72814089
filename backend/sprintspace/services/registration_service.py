"""
SprintSpace Backend — Registration Service (Registration Resource Handler)
============================================================================

What:  CRUD over registrations plus maintenance of the parent event's
       derived `total_registration_count`.
Who:   Called by routes/registrations.py and routes/events.py.

Counter maintenance:
    Create:  parent must exist (404 otherwise) → INSERT registration →
             UPDATE events SET total = total + 1
    Delete:  registration and parent must exist (404 otherwise) →
             DELETE registration → UPDATE events SET total = total - 1
             WHERE total > 0
    Both steps run in the request's single transaction and the counter is
    changed by an atomic SQL expression, never read-modify-write in Python,
    so concurrent writers cannot lose updates.

Search:
    Title search is a case-insensitive substring match (ILIKE). The user's
    text is escaped so %, _ and backslash match literally.
"""

import logging
from typing import List, Optional

from sqlalchemy import Update, desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sprintspace.exceptions import DatabaseError, NotFoundError
from sprintspace.identifiers import check_object_id
from sprintspace.models.event import Event
from sprintspace.models.registration import Registration
from sprintspace.schemas.common import DeleteResult
from sprintspace.schemas.registration import (
    RegistrationCreate,
    RegistrationResponse,
    RegistrationUpdate,
)
from sprintspace.services.auth_service import Identity

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """Build a LIKE pattern matching `text` literally anywhere in a value."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def increment_registration_count(event_id: str) -> Update:
    return (
        update(Event)
        .where(Event.id == event_id)
        .values(total_registration_count=Event.total_registration_count + 1)
        .execution_options(synchronize_session=False)
    )


def decrement_registration_count(event_id: str) -> Update:
    # Floored at zero: the WHERE clause skips the update when already 0
    return (
        update(Event)
        .where(Event.id == event_id, Event.total_registration_count > 0)
        .values(total_registration_count=Event.total_registration_count - 1)
        .execution_options(synchronize_session=False)
    )


def registration_to_response(registration: Registration) -> RegistrationResponse:
    data = dict(registration.attributes or {})
    data.update(
        id=registration.id,
        eventId=registration.event_id,
        userEmail=registration.user_email,
        eventTitle=registration.event_title,
        createdAt=registration.created_at,
    )
    return RegistrationResponse.model_validate(data)


class RegistrationService:
    """
    Responsibilities:
        - list_registrations() / search_registrations() / list_for_event()
        - get_registration()
        - create_registration(): insert + counter increment
        - update_registration(): partial update, identifiers stripped
        - delete_registration(): delete + floored counter decrement
    """

    async def list_registrations(
        self,
        db: AsyncSession,
        email: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[RegistrationResponse]:
        filters = []
        if email:
            filters.append(Registration.user_email == email)
        if search:
            filters.append(Registration.event_title.ilike(contains_pattern(search), escape=LIKE_ESCAPE))
        return await self._select(db, filters)

    async def search_registrations(
        self, db: AsyncSession, title: Optional[str] = None
    ) -> List[RegistrationResponse]:
        return await self.list_registrations(db, search=title)

    async def list_for_event(self, db: AsyncSession, event_id: str) -> List[RegistrationResponse]:
        event_id = check_object_id(event_id, "event")
        return await self._select(db, [Registration.event_id == event_id])

    async def get_registration(self, db: AsyncSession, registration_id: str) -> RegistrationResponse:
        registration_id = check_object_id(registration_id, "registration")
        registration = await self._get(db, Registration, registration_id)
        if registration is None:
            raise NotFoundError(resource="registration", resource_id=registration_id)
        return registration_to_response(registration)

    async def create_registration(
        self,
        db: AsyncSession,
        payload: RegistrationCreate,
        identity: Identity,
    ) -> RegistrationResponse:
        """
        Register the caller for an event and bump the event's counter.

        Raises:
            ValidationError: eventId is not a 24-hex id (→ 400)
            NotFoundError: the event does not exist; nothing is inserted (→ 404)
        """
        event_id = check_object_id(payload.event_id, "event")
        event = await self._get(db, Event, event_id)
        if event is None:
            raise NotFoundError(resource="event", resource_id=event_id)

        registration = Registration(
            event_id=event_id,
            user_email=identity.email,
            event_title=payload.event_title or event.title,
            attributes=payload.extra_attributes(),
        )
        try:
            db.add(registration)
            await db.flush()
            await db.execute(increment_registration_count(event_id))
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating registration for event %s: %s", event_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the registration. Please try again.",
                context={"event_id": event_id},
            )

        logger.info("Registration %s created for event %s by %s", registration.id, event_id, identity.email)
        return registration_to_response(registration)

    async def update_registration(
        self,
        db: AsyncSession,
        registration_id: str,
        payload: RegistrationUpdate,
    ) -> RegistrationResponse:
        registration_id = check_object_id(registration_id, "registration")
        registration = await self._get(db, Registration, registration_id)
        if registration is None:
            raise NotFoundError(resource="registration", resource_id=registration_id)

        if payload.event_title is not None:
            registration.event_title = payload.event_title
        extras = payload.extra_attributes()
        if extras:
            registration.attributes = {**(registration.attributes or {}), **extras}

        try:
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating registration %s: %s", registration_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the registration. Please try again.",
                context={"registration_id": registration_id},
            )
        return registration_to_response(registration)

    async def delete_registration(self, db: AsyncSession, registration_id: str) -> DeleteResult:
        """
        Delete a registration and decrement its event's counter.

        Raises:
            NotFoundError: registration or its event is missing; nothing
                is deleted (→ 404)
        """
        registration_id = check_object_id(registration_id, "registration")
        registration = await self._get(db, Registration, registration_id)
        if registration is None:
            raise NotFoundError(resource="registration", resource_id=registration_id)

        event = await self._get(db, Event, registration.event_id)
        if event is None:
            raise NotFoundError(resource="event", resource_id=registration.event_id)

        try:
            await db.delete(registration)
            await db.flush()
            result = await db.execute(decrement_registration_count(event.id))
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting registration %s: %s", registration_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the registration. Please try again.",
                context={"registration_id": registration_id},
            )

        if result.rowcount == 0:
            logger.warning("Counter for event %s was already zero", event.id)
        logger.info("Registration %s deleted from event %s", registration_id, event.id)
        return DeleteResult(deleted_count=1)

    async def _get(self, db: AsyncSession, model, record_id: str):
        try:
            return await db.get(model, record_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching %s %s: %s", model.__tablename__, record_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the record. Please try again.",
                context={"table": model.__tablename__, "id": record_id},
            )

    async def _select(self, db: AsyncSession, filters) -> List[RegistrationResponse]:
        try:
            result = await db.execute(
                select(Registration)
                .where(*filters)
                .order_by(desc(Registration.created_at), Registration.id)
            )
            registrations = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing registrations: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve registrations. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [registration_to_response(r) for r in registrations]


registration_service = RegistrationService()
