"""
SprintSpace Backend — Registration Route Handlers
===================================================

Every route requires a valid token. /registrations/search is declared
before /registrations/{registration_id} so "search" is never read as an id.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sprintspace.database import get_db_session
from sprintspace.schemas.common import DeleteResult, ErrorResponse
from sprintspace.schemas.registration import (
    RegistrationCreate,
    RegistrationResponse,
    RegistrationUpdate,
)
from sprintspace.services.auth_service import Identity, require_identity
from sprintspace.services.registration_service import registration_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/registrations",
    tags=["Registrations"],
    dependencies=[Depends(require_identity)],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)

ID_ERRORS = {
    400: {"description": "Malformed id", "model": ErrorResponse},
    404: {"description": "Registration or event not found", "model": ErrorResponse},
}


@router.get("", response_model=List[RegistrationResponse], summary="List registrations")
async def list_registrations(
    email: Optional[str] = Query(default=None, description="Only registrations of this user"),
    search: Optional[str] = Query(default=None, description="Case-insensitive event title substring"),
    db: AsyncSession = Depends(get_db_session),
) -> List[RegistrationResponse]:
    logger.debug("Listing registrations email=%s search=%r", email, search)
    return await registration_service.list_registrations(db=db, email=email, search=search)


@router.get(
    "/search",
    response_model=List[RegistrationResponse],
    summary="Search registrations by event title",
)
async def search_registrations(
    title: Optional[str] = Query(default=None, description="Case-insensitive title substring"),
    db: AsyncSession = Depends(get_db_session),
) -> List[RegistrationResponse]:
    logger.debug("Registration title search: %r", title)
    return await registration_service.search_registrations(db=db, title=title)


@router.get(
    "/{registration_id}",
    response_model=RegistrationResponse,
    responses=ID_ERRORS,
    summary="Get a single registration",
)
async def get_registration(
    registration_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> RegistrationResponse:
    return await registration_service.get_registration(db=db, registration_id=registration_id)


@router.post(
    "",
    status_code=201,
    response_model=RegistrationResponse,
    responses=ID_ERRORS,
    summary="Register the caller for an event",
)
async def create_registration(
    payload: RegistrationCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> RegistrationResponse:
    return await registration_service.create_registration(db=db, payload=payload, identity=identity)


@router.put(
    "/{registration_id}",
    response_model=RegistrationResponse,
    responses=ID_ERRORS,
    summary="Partially update a registration",
)
async def update_registration(
    registration_id: str,
    payload: RegistrationUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> RegistrationResponse:
    return await registration_service.update_registration(
        db=db, registration_id=registration_id, payload=payload
    )


@router.delete(
    "/{registration_id}",
    response_model=DeleteResult,
    responses=ID_ERRORS,
    summary="Delete a registration and decrement its event counter",
)
async def delete_registration(
    registration_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResult:
    return await registration_service.delete_registration(db=db, registration_id=registration_id)
