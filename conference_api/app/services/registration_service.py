"""
Business logic for conference registrations.

The ``RegistrationService`` covers the registration form intake and the
administrative review workflow: listing with search and pagination,
single and bulk status transitions, full updates and deletion.  Status
changes are mirrored into the optional ``form_submissions`` table on a
best‑effort basis; deleting a registration also removes its payment
proof from the file store.
"""

import logging
import math
import sqlite3
from typing import Any, Dict, Iterable, List, Optional

from conference_api.app.core.db import SQLITE_MAX_INT, Database, chunked
from conference_api.app.core.errors import ConflictError, NotFoundError, ValidationError
from conference_api.app.schemas.registration import (
    REGISTRATION_STATUSES,
    RegistrationCreate,
    RegistrationUpdate,
)
from conference_api.app.services.enrollment_service import EnrollmentService
from conference_api.app.services.file_store import LocalFileStore
from conference_api.app.services.form_submission_service import (
    FormSubmissionSync,
    log_sync_result,
)


logger = logging.getLogger(__name__)

INITIAL_STATUS = "pending"

REQUIRED_FIELDS = (
    ("first_name", "firstName"),
    ("last_name", "lastName"),
    ("email", "email"),
    ("registration_type", "registrationType"),
)


def validate_status(status: Optional[str]) -> str:
    """Return ``status`` if it belongs to the closed set of review statuses."""
    if status not in REGISTRATION_STATUSES:
        raise ValidationError(
            "Invalid status. Allowed values: " + ", ".join(REGISTRATION_STATUSES)
        )
    return status


class RegistrationService:
    """Service for registration intake and administrative review."""

    def __init__(
        self,
        db: Database,
        file_store: LocalFileStore,
        form_sync: Optional[FormSubmissionSync] = None,
    ) -> None:
        self.db = db
        self.file_store = file_store
        self.form_sync = form_sync or FormSubmissionSync(db)

    async def submit_registration(self, data: RegistrationCreate) -> Dict[str, Any]:
        """Persist a new registration from the public form.

        All of ``firstName``, ``lastName``, ``email`` and
        ``registrationType`` must be non-empty; the error names every
        missing field.  The email must not be registered yet.  The new
        row starts in status ``pending``.
        """
        missing = [label for field, label in REQUIRED_FIELDS if not getattr(data, field)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        with self.db.transaction() as cursor:
            existing = cursor.execute(
                "SELECT id FROM registrations WHERE email = ?", (data.email,)
            ).fetchone()
            if existing:
                raise ConflictError("Email already registered")
            cursor.execute(
                """
                INSERT INTO registrations (
                    first_name, last_name, email, organization, phone, position, country,
                    registration_type, special_requirements, payment_proof_url, status
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    data.first_name,
                    data.last_name,
                    data.email,
                    data.organization or None,
                    data.phone or None,
                    data.position or None,
                    data.country or None,
                    data.registration_type,
                    data.resolved_special_requirements(),
                    data.payment_proof_url or None,
                    INITIAL_STATUS,
                ),
            )
            registration_id = cursor.lastrowid
            row = cursor.execute(
                "SELECT * FROM registrations WHERE id = ?", (registration_id,)
            ).fetchone()
        logger.info("Registration %s submitted for %s", registration_id, data.email)
        return dict(row)

    async def get_registration(self, registration_id: int) -> Dict[str, Any]:
        """Retrieve a single registration or raise ``NotFoundError``."""
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT * FROM registrations WHERE id = ?", (registration_id,)
            ).fetchone()
        if not row:
            raise NotFoundError("Registration not found")
        return dict(row)

    async def list_registrations(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Return one page of registrations with pagination metadata.

        - ``status``: exact match; ``all`` or empty disables the filter.
        - ``search``: case‑insensitive substring of first name, last name
          or email.
        - ``page`` and ``limit``: 1‑based page number and page size.

        Rows are ordered newest first.  ``pagination.total`` counts every
        match regardless of the requested page.
        """
        where_clauses: list[str] = []
        params: list[Any] = []
        if status and status != "all":
            where_clauses.append("status = ?")
            params.append(status)
        if search:
            where_clauses.append(
                "(first_name LIKE ? ESCAPE '\\' OR last_name LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\')"
            )
            escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            term = f"%{escaped}%"
            params.extend([term, term, term])
        where_sql = " WHERE " + " AND ".join(where_clauses) if where_clauses else ""

        offset = min((page - 1) * limit, SQLITE_MAX_INT)
        with self.db.cursor() as cursor:
            total = cursor.execute(
                f"SELECT COUNT(*) FROM registrations{where_sql}", tuple(params)
            ).fetchone()[0]
            rows = cursor.execute(
                f"SELECT * FROM registrations{where_sql} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                tuple(params + [limit, offset]),
            ).fetchall()
        return {
            "registrations": [dict(row) for row in rows],
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }

    async def transition_status(self, registration_id: int, status: Optional[str]) -> Dict[str, Any]:
        """Move a registration to a new review status.

        Raises ``ValidationError`` for a status outside the closed set
        and ``NotFoundError`` if the registration does not exist.  The
        matching form submission is updated afterwards; failure there is
        only logged.
        """
        status = validate_status(status)
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE registrations SET status = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (status, registration_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("Registration not found")
            row = cursor.execute(
                "SELECT * FROM registrations WHERE id = ?", (registration_id,)
            ).fetchone()
        logger.info("Registration %s status changed to %s", registration_id, status)
        self._sync_form_submissions([registration_id], status)
        return dict(row)

    async def bulk_transition_status(self, ids: Optional[List[int]], status: Optional[str]) -> int:
        """Apply one status to many registrations.

        Unknown ids are skipped silently; the number of rows actually
        updated is returned.  Long id lists are applied in chunks within
        a single transaction.
        """
        if not ids:
            raise ValidationError("IDs array is required")
        if any(not 1 <= reg_id <= SQLITE_MAX_INT for reg_id in ids):
            raise ValidationError("IDs must be positive integers within range")
        status = validate_status(status)
        unique_ids = list(dict.fromkeys(ids))
        updated = 0
        with self.db.transaction() as cursor:
            for chunk in chunked(unique_ids):
                placeholders = ",".join("?" for _ in chunk)
                cursor.execute(
                    f"UPDATE registrations SET status = ?, updated_at = CURRENT_TIMESTAMP WHERE id IN ({placeholders})",
                    (status, *chunk),
                )
                updated += cursor.rowcount
        logger.info("%s registrations moved to status %s", updated, status)
        self._sync_form_submissions(unique_ids, status)
        return updated

    async def update_registration(self, registration_id: int, data: RegistrationUpdate) -> Dict[str, Any]:
        """Overwrite a registration's identity and profile fields.

        Optional fields that are omitted are cleared.  Omitted required
        identity fields keep their stored values since the columns
        cannot be empty.  Raises ``NotFoundError`` if the registration
        does not exist and ``ConflictError`` if the new email belongs to
        another registration.
        """
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    """
                    UPDATE registrations SET
                        first_name = COALESCE(?, first_name),
                        last_name = COALESCE(?, last_name),
                        email = COALESCE(?, email),
                        phone = ?,
                        organization = ?,
                        position = ?,
                        registration_type = COALESCE(?, registration_type),
                        special_requirements = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    (
                        data.first_name or None,
                        data.last_name or None,
                        data.email or None,
                        data.phone,
                        data.organization,
                        data.position,
                        data.registration_type or None,
                        data.resolved_special_requirements(),
                        registration_id,
                    ),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError("Registration not found")
                row = cursor.execute(
                    "SELECT * FROM registrations WHERE id = ?", (registration_id,)
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            if "registrations.email" in str(exc):
                raise ConflictError("Email already registered") from exc
            raise
        logger.info("Registration %s updated", registration_id)
        return dict(row)

    async def delete_registration(self, registration_id: int) -> int:
        """Delete a registration and its payment proof.

        The stored payment‑proof file is removed first if it still
        exists; a failure to remove it is logged and does not stop the
        deletion.  Enrollments of the registrant are released and their
        session/activity counters decremented in the same transaction as
        the row deletion.
        """
        registration = await self.get_registration(registration_id)

        proof_path = registration.get("payment_proof_url")
        if proof_path and self.file_store.exists(proof_path):
            try:
                self.file_store.delete(proof_path)
            except OSError as exc:
                logger.warning(
                    "Could not delete payment proof file %s for registration %s: %s",
                    proof_path,
                    registration_id,
                    exc,
                )

        with self.db.transaction() as cursor:
            EnrollmentService.release_enrollments(cursor, registration_id)
            cursor.execute("DELETE FROM registrations WHERE id = ?", (registration_id,))
            if cursor.rowcount == 0:
                raise NotFoundError("Registration not found")
        logger.info("Registration %s deleted", registration_id)
        return registration_id

    def _sync_form_submissions(self, ids: Iterable[int], status: str) -> None:
        ids = list(ids)
        result = self.form_sync.sync_status(ids, status)
        log_sync_result(result, ids)
