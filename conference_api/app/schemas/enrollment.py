"""
Pydantic models for session and activity enrollments.

An enrollment is a join-row linking one registration to one session
or activity.  Listing endpoints return the parent entity's own fields
together with the join-row's ``registered_at`` and
``registration_status``.
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class EnrollmentCreate(BaseModel):
    # Optional so that a missing id produces the service's 400 response.
    registration_id: Optional[Union[int, str]] = Field(None, example=1)


class EnrollmentBase(BaseModel):
    id: int
    registration_id: int
    status: str
    registered_at: datetime

    model_config = {
        "from_attributes": True,
    }


class SessionEnrollmentRead(EnrollmentBase):
    session_id: int


class ActivityEnrollmentRead(EnrollmentBase):
    activity_id: int


class RegistrantEnrollments(BaseModel):
    sessions: list[dict[str, Any]]
    activities: list[dict[str, Any]]


class MessageResponse(BaseModel):
    message: str
