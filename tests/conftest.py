import pytest
from fastapi.testclient import TestClient

from conference_api.app.core.config import Settings
from conference_api.app.core.db import Database
from conference_api.app.main import create_app
from conference_api.app.services.enrollment_service import EnrollmentService
from conference_api.app.services.file_store import LocalFileStore
from conference_api.app.services.registration_service import RegistrationService


@pytest.fixture
def settings(tmp_path):
    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()
    return Settings(
        database_url=str(tmp_path / "conference.db"),
        upload_dir=str(upload_dir),
        log_level="WARNING",
        db_timeout=30,
    )


@pytest.fixture
def db(settings):
    database = Database.from_settings(settings)
    database.init_db()
    return database


@pytest.fixture
def file_store(settings):
    return LocalFileStore(settings.upload_dir)


@pytest.fixture
def enrollments(db):
    return EnrollmentService(db)


@pytest.fixture
def registrations(db, file_store):
    return RegistrationService(db, file_store)


@pytest.fixture
def client(settings, db):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
