"""
Session and activity enrollment endpoints for API v1.

These routes enroll a registrant into sessions and activities, remove
them again and list a registrant's enrollments.  They rely on the
``EnrollmentService`` for capacity checks, duplicate prevention and
counter maintenance.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, status

from conference_api.app.api.deps import get_enrollment_service
from conference_api.app.core.db import SQLITE_MAX_INT
from conference_api.app.core.errors import RegistrationError
from conference_api.app.schemas.enrollment import (
    ActivityEnrollmentRead,
    EnrollmentCreate,
    MessageResponse,
    RegistrantEnrollments,
    SessionEnrollmentRead,
)
from conference_api.app.services.enrollment_service import EnrollmentService, ParentKind


router = APIRouter()


@router.post(
    "/sessions/{session_id}",
    response_model=SessionEnrollmentRead,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_in_session(
    session_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the session"),
    body: EnrollmentCreate | None = None,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> SessionEnrollmentRead:
    """Register a registrant for a published session.

    Returns 404 if the session does not exist or is not published, and
    400 if ``registration_id`` is missing, the session is full or the
    registrant is already registered.
    """
    registration_id = body.registration_id if body else None
    try:
        return await service.enroll(session_id, registration_id, ParentKind.SESSION)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete(
    "/sessions/{session_id}/{registration_id}",
    response_model=MessageResponse,
)
async def unenroll_from_session(
    session_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the session"),
    registration_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the registration"),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> MessageResponse:
    """Unregister a registrant from a session."""
    try:
        await service.unenroll(session_id, registration_id, ParentKind.SESSION)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return MessageResponse(message="Unregistered from session successfully")


@router.post(
    "/activities/{activity_id}",
    response_model=ActivityEnrollmentRead,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_in_activity(
    activity_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the activity"),
    body: EnrollmentCreate | None = None,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ActivityEnrollmentRead:
    """Register a registrant for an active activity.

    Error responses mirror the session enrollment endpoint.
    """
    registration_id = body.registration_id if body else None
    try:
        return await service.enroll(activity_id, registration_id, ParentKind.ACTIVITY)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete(
    "/activities/{activity_id}/{registration_id}",
    response_model=MessageResponse,
)
async def unenroll_from_activity(
    activity_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the activity"),
    registration_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the registration"),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> MessageResponse:
    """Unregister a registrant from an activity."""
    try:
        await service.unenroll(activity_id, registration_id, ParentKind.ACTIVITY)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return MessageResponse(message="Unregistered from activity successfully")


@router.get("/user/{registration_id}", response_model=RegistrantEnrollments)
async def list_registrant_enrollments(
    registration_id: int = Path(..., ge=1, le=SQLITE_MAX_INT, description="ID of the registration"),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> RegistrantEnrollments:
    """List the published sessions and active activities of a registrant.

    Each entry carries the session/activity fields plus
    ``registered_at`` and ``registration_status``, ordered by date and
    start time.
    """
    return await service.list_for_registrant(registration_id)
