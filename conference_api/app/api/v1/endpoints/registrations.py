"""
Registration endpoints for API v1.

These routes accept the public registration form and expose the
administrative review workflow: listing with search and pagination,
status transitions (single and bulk), statistics, full updates and
deletion.  Authentication is enforced by the gateway in front of the
service.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from conference_api.app.api.deps import get_registration_service, get_statistics_service
from conference_api.app.core.db import SQLITE_MAX_INT
from conference_api.app.core.errors import RegistrationError
from conference_api.app.schemas.registration import (
    BulkStatusResult,
    BulkStatusUpdate,
    RegistrationCreate,
    RegistrationDeleted,
    RegistrationEnvelope,
    RegistrationList,
    RegistrationSubmitted,
    RegistrationUpdate,
    StatusUpdate,
)
from conference_api.app.services.registration_service import RegistrationService
from conference_api.app.services.statistics_service import StatisticsService


router = APIRouter()


@router.post("/", response_model=RegistrationSubmitted, status_code=status.HTTP_201_CREATED)
async def submit_registration(
    registration: RegistrationCreate = Body(...),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationSubmitted:
    """Submit the conference registration form.

    Returns 400 naming every missing required field, or if the email is
    already registered.  New registrations start in status ``pending``.
    """
    try:
        created = await service.submit_registration(registration)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return RegistrationSubmitted(
        message="Registration submitted successfully and is under review",
        registration=created,
        status="pending",
    )


@router.get("/", response_model=RegistrationList)
async def list_registrations(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1, le=SQLITE_MAX_INT),
    limit: int = Query(20, ge=1, le=SQLITE_MAX_INT),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationList:
    """List registrations for review.

    - **status**: exact status, or `all`.
    - **search**: substring of first name, last name or email.
    - **page**, **limit**: pagination (defaults 1 and 20).
    """
    return await service.list_registrations(
        status=status_filter, search=search, page=page, limit=limit
    )


@router.get("/stats/overview")
async def registration_statistics(
    service: StatisticsService = Depends(get_statistics_service),
):
    """Return counts by status, new registrations this week and counts by type."""
    return await service.overview()


@router.patch("/bulk/status", response_model=BulkStatusResult)
async def bulk_update_status(
    body: BulkStatusUpdate,
    service: RegistrationService = Depends(get_registration_service),
) -> BulkStatusResult:
    """Apply one status to several registrations.

    Unknown ids are ignored; ``updatedCount`` reports how many
    registrations were changed.
    """
    try:
        updated = await service.bulk_transition_status(body.ids, body.status)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return BulkStatusResult(
        message=f"{updated} registrations updated successfully",
        updatedCount=updated,
    )


@router.get("/{registration_id}", response_model=RegistrationEnvelope)
async def get_registration(
    registration_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the registration"),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationEnvelope:
    """Retrieve a single registration."""
    try:
        registration = await service.get_registration(registration_id)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return RegistrationEnvelope(message="Registration found", registration=registration)


@router.patch("/{registration_id}/status", response_model=RegistrationEnvelope)
async def update_registration_status(
    body: StatusUpdate,
    registration_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the registration"),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationEnvelope:
    """Change the review status of a registration.

    Allowed values: `pending`, `under_review`, `approved`, `rejected`,
    `waitlist`, `cancelled`.
    """
    try:
        registration = await service.transition_status(registration_id, body.status)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return RegistrationEnvelope(
        message=f"Registration status updated to {body.status}",
        registration=registration,
    )


@router.put("/{registration_id}", response_model=RegistrationEnvelope)
async def update_registration(
    registration_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the registration"),
    update: RegistrationUpdate = Body(...),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationEnvelope:
    """Overwrite the identity and profile fields of a registration."""
    try:
        registration = await service.update_registration(registration_id, update)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return RegistrationEnvelope(
        message="Registration updated successfully", registration=registration
    )


@router.delete("/{registration_id}", response_model=RegistrationDeleted)
async def delete_registration(
    registration_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the registration"),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationDeleted:
    """Delete a registration together with its payment proof file."""
    try:
        deleted_id = await service.delete_registration(registration_id)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return RegistrationDeleted(message="Registration deleted successfully", deletedId=deleted_id)
