"""
Pydantic models for conference registrations.

Request bodies use the camelCase field names sent by the registration
form (``firstName``, ``registrationType`` ...), except for the legacy
``special_requirements`` key.  Required fields are declared optional here because
the service reports every missing field in a single 400 response
instead of the framework's per-field 422 errors.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


REGISTRATION_STATUSES = (
    "pending",
    "under_review",
    "approved",
    "rejected",
    "waitlist",
    "cancelled",
)


class RegistrationFields(BaseModel):
    first_name: Optional[str] = Field(None, alias="firstName", example="Ada")
    last_name: Optional[str] = Field(None, alias="lastName", example="Lovelace")
    email: Optional[str] = Field(None, example="ada@example.com")
    phone: Optional[str] = Field(None, example="+44 20 7946 0000")
    organization: Optional[str] = Field(None, example="Analytical Engines Ltd")
    position: Optional[str] = Field(None, example="Researcher")
    registration_type: Optional[str] = Field(None, alias="registrationType", example="academic")
    special_requirements: Optional[str] = Field(None, alias="specialRequirements")
    # The form historically posted this field in snake_case only; it
    # is consulted when ``specialRequirements`` is absent.
    special_requirements_legacy: Optional[str] = Field(None, alias="special_requirements")

    def resolved_special_requirements(self) -> Optional[str]:
        return self.special_requirements_legacy or self.special_requirements or None


class RegistrationCreate(RegistrationFields):
    """Schema for the public registration form."""

    country: Optional[str] = Field(None, example="United Kingdom")
    payment_proof_url: Optional[str] = Field(None, alias="paymentProofUrl")


class RegistrationUpdate(RegistrationFields):
    """Schema for overwriting a registration's identity and profile fields."""
    pass


class RegistrationRead(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    organization: Optional[str] = None
    phone: Optional[str] = None
    position: Optional[str] = None
    country: Optional[str] = None
    registration_type: Optional[str] = None
    special_requirements: Optional[str] = None
    payment_proof_url: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
    }


class StatusUpdate(BaseModel):
    status: Optional[str] = Field(None, example="approved")


class BulkStatusUpdate(BaseModel):
    ids: Optional[list[int]] = Field(None, example=[1, 2, 3])
    status: Optional[str] = Field(None, example="approved")


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class RegistrationList(BaseModel):
    registrations: list[RegistrationRead]
    pagination: Pagination


class RegistrationEnvelope(BaseModel):
    message: str
    registration: RegistrationRead


class RegistrationSubmitted(RegistrationEnvelope):
    status: str = "pending"


class BulkStatusResult(BaseModel):
    message: str
    updatedCount: int


class RegistrationDeleted(BaseModel):
    message: str
    deletedId: int
