"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers under a unified prefix.
When new endpoints are added, update this file to include their
routers.
"""

from fastapi import APIRouter

from .endpoints import enrollments, registrations

router = APIRouter()

# Enrollment paths (/sessions/..., /activities/..., /user/...) share the
# /registrations prefix with the registration resource.  They are
# included first so that they take precedence over "/{registration_id}".
router.include_router(enrollments.router, prefix="/registrations", tags=["enrollments"])
router.include_router(registrations.router, prefix="/registrations", tags=["registrations"])
