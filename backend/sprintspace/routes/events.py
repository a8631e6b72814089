"""
SprintSpace Backend — Event Route Handlers
============================================

What:  /events and its /marathons aliases, plus /running-events.
How:   Extracts query parameters, delegates to EventService, returns JSON.

Route Inventory:
    GET    /events, /marathons                     list (paginated)
    GET    /events/details/{id}, /marathons/{id}   detail
    GET    /running-events                         upcoming + random sample
    POST   /events, /marathons                     create (auth)
    PUT    /events/{id}, /marathons/{id}           update (auth, owner)
    DELETE /events/{id}, /marathons/{id}           delete (auth, owner)
    GET    /events/{id}/registrations,
           /marathons/{id}/registrations           registrations of an event (auth)
"""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sprintspace.config import Settings, get_settings
from sprintspace.database import get_db_session
from sprintspace.schemas.common import DeleteResult, ErrorResponse
from sprintspace.schemas.event import (
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
    RunningEventsResponse,
)
from sprintspace.schemas.registration import RegistrationResponse
from sprintspace.services.auth_service import Identity, require_identity
from sprintspace.services.event_service import event_service
from sprintspace.services.registration_service import registration_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Events"])

ID_ERRORS = {
    400: {"description": "Malformed event id", "model": ErrorResponse},
    404: {"description": "Event not found", "model": ErrorResponse},
}
AUTH_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the event owner", "model": ErrorResponse},
}


@router.get(
    "/events",
    response_model=EventListResponse,
    summary="List events with pagination",
)
@router.get("/marathons", response_model=EventListResponse, include_in_schema=False)
async def list_events(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(default=None, ge=1, le=100, description="Items per page"),
    email: Optional[str] = Query(default=None, description="Only events owned by this email"),
    sort: Literal["asc", "desc"] = Query(default="desc", description="Creation time order"),
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> EventListResponse:
    logger.debug("Listing events page=%d limit=%s email=%s sort=%s", page, limit, email, sort)
    return await event_service.list_events(
        db=db,
        page=page,
        limit=limit or settings.events_page_size,
        email=email,
        sort=sort,
        my_events_limit=settings.my_events_limit,
    )


@router.get(
    "/running-events",
    response_model=RunningEventsResponse,
    summary="Upcoming events and a random sample of them",
)
async def running_events(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> RunningEventsResponse:
    return await event_service.running_events(
        db=db,
        limit=limit or settings.running_events_limit,
        sample_size=settings.running_events_sample_size,
    )


@router.get(
    "/events/details/{event_id}",
    response_model=EventResponse,
    responses=ID_ERRORS,
    summary="Get a single event",
)
@router.get("/marathons/{event_id}", response_model=EventResponse, include_in_schema=False)
async def get_event(
    event_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> EventResponse:
    return await event_service.get_event(db=db, event_id=event_id)


@router.post(
    "/events",
    status_code=201,
    response_model=EventResponse,
    responses=AUTH_ERRORS,
    summary="Create an event owned by the caller",
)
@router.post("/marathons", status_code=201, response_model=EventResponse, include_in_schema=False)
async def create_event(
    payload: EventCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> EventResponse:
    return await event_service.create_event(db=db, payload=payload, identity=identity)


@router.put(
    "/events/{event_id}",
    response_model=EventResponse,
    responses={**ID_ERRORS, **AUTH_ERRORS},
    summary="Partially update an event the caller owns",
)
@router.put("/marathons/{event_id}", response_model=EventResponse, include_in_schema=False)
async def update_event(
    event_id: str,
    payload: EventUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> EventResponse:
    return await event_service.update_event(
        db=db, event_id=event_id, payload=payload, identity=identity
    )


@router.delete(
    "/events/{event_id}",
    response_model=DeleteResult,
    responses={**ID_ERRORS, **AUTH_ERRORS},
    summary="Delete an event the caller owns",
)
@router.delete("/marathons/{event_id}", response_model=DeleteResult, include_in_schema=False)
async def delete_event(
    event_id: str,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResult:
    return await event_service.delete_event(db=db, event_id=event_id, identity=identity)


@router.get(
    "/events/{event_id}/registrations",
    response_model=List[RegistrationResponse],
    responses={400: ID_ERRORS[400], 401: AUTH_ERRORS[401]},
    summary="List registrations referencing an event",
)
@router.get(
    "/marathons/{event_id}/registrations",
    response_model=List[RegistrationResponse],
    include_in_schema=False,
)
async def list_event_registrations(
    event_id: str,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[RegistrationResponse]:
    logger.info("%s listed registrations of event %s", identity.email, event_id)
    return await registration_service.list_for_event(db=db, event_id=event_id)
