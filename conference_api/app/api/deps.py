"""
FastAPI dependencies providing services bound to the shared resources.

``create_app`` stores the ``Database`` handle and the file store on
``app.state``; these helpers build the per‑request service objects
around them.
"""

from fastapi import Depends, Request

from conference_api.app.core.db import Database
from conference_api.app.services.enrollment_service import EnrollmentService
from conference_api.app.services.file_store import LocalFileStore
from conference_api.app.services.registration_service import RegistrationService
from conference_api.app.services.statistics_service import StatisticsService


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_file_store(request: Request) -> LocalFileStore:
    return request.app.state.file_store


def get_enrollment_service(db: Database = Depends(get_database)) -> EnrollmentService:
    return EnrollmentService(db)


def get_registration_service(
    db: Database = Depends(get_database),
    file_store: LocalFileStore = Depends(get_file_store),
) -> RegistrationService:
    return RegistrationService(db, file_store)


def get_statistics_service(db: Database = Depends(get_database)) -> StatisticsService:
    return StatisticsService(db)
