"""
Business logic for session and activity enrollments.

An enrollment links a registration to a session or activity through a
join-row.  Sessions and activities carry an optional ``capacity`` and a
``current_registrations`` counter that must always equal the number of
their join-rows in status ``registered``.  Every check-then-write
sequence runs inside ``Database.transaction`` so that concurrent
enrollments for the same parent are serialized: capacity cannot be
overrun and the counter cannot drift from the join-rows.
"""

import logging
import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Union

from conference_api.app.core.db import SQLITE_MAX_INT, Database
from conference_api.app.core.errors import ConflictError, NotFoundError, ValidationError


logger = logging.getLogger(__name__)

REGISTERED = "registered"


class ParentKind(str, Enum):
    SESSION = "session"
    ACTIVITY = "activity"


@dataclass(frozen=True)
class ParentTable:
    """Table layout of one kind of enrollable entity."""

    label: str
    table: str
    join_table: str
    fk_column: str
    eligible_status: str
    order_by: str


PARENTS: Dict[ParentKind, ParentTable] = {
    ParentKind.SESSION: ParentTable(
        label="Session",
        table="sessions",
        join_table="session_registrations",
        fk_column="session_id",
        eligible_status="published",
        order_by="p.date ASC, p.start_time ASC",
    ),
    ParentKind.ACTIVITY: ParentTable(
        label="Activity",
        table="activities",
        join_table="activity_registrations",
        fk_column="activity_id",
        eligible_status="active",
        order_by="p.date ASC, p.time ASC",
    ),
}


def _normalize_registration_id(registration_id: Union[int, str, None]) -> int:
    if registration_id is None or (isinstance(registration_id, str) and not registration_id.strip()):
        raise ValidationError("Registration ID is required")
    try:
        value = int(registration_id)
    except (TypeError, ValueError):
        raise ValidationError("Registration ID must be an integer")
    if not 1 <= value <= SQLITE_MAX_INT:
        raise ValidationError("Registration ID is out of range")
    return value


class EnrollmentService:
    """Service for enrolling registrants into sessions and activities."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def enroll(
        self,
        parent_id: int,
        registration_id: Union[int, str, None],
        parent_kind: ParentKind,
    ) -> Dict[str, Any]:
        """Enroll a registrant into a session or activity.

        Checks, in order: the parent exists and is eligible (404), the
        registration id is present (400), a seat is free unless capacity
        is unlimited (400), the registrant is not already enrolled (400)
        and the registration exists (404).  On success the join-row is
        created (or a cancelled one reactivated) and the parent's
        counter incremented within the same transaction.  Returns the
        join-row as a dictionary.
        """
        parent = PARENTS[ParentKind(parent_kind)]
        with self.db.transaction() as cursor:
            parent_row = cursor.execute(
                f"SELECT id, capacity FROM {parent.table} WHERE id = ? AND status = ?",
                (parent_id, parent.eligible_status),
            ).fetchone()
            if not parent_row:
                raise NotFoundError(
                    f"{parent.label} not found or not {parent.eligible_status}"
                )

            reg_id = _normalize_registration_id(registration_id)

            capacity = parent_row["capacity"]
            current_count = cursor.execute(
                f"SELECT COUNT(*) FROM {parent.join_table} WHERE {parent.fk_column} = ? AND status = ?",
                (parent_id, REGISTERED),
            ).fetchone()[0]
            if capacity is not None and current_count >= capacity:
                raise ConflictError(f"{parent.label} is full")

            existing = cursor.execute(
                f"SELECT id, status FROM {parent.join_table} WHERE {parent.fk_column} = ? AND registration_id = ?",
                (parent_id, reg_id),
            ).fetchone()
            if existing and existing["status"] == REGISTERED:
                raise ConflictError(f"Already registered for this {parent.label.lower()}")

            registration = cursor.execute(
                "SELECT id FROM registrations WHERE id = ?", (reg_id,)
            ).fetchone()
            if not registration:
                raise NotFoundError(f"Registration {reg_id} not found")

            if existing:
                # One row per pair: a cancelled enrollment is reactivated.
                cursor.execute(
                    f"UPDATE {parent.join_table} SET status = ?, registered_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (REGISTERED, existing["id"]),
                )
                join_id = existing["id"]
            else:
                cursor.execute(
                    f"INSERT INTO {parent.join_table} ({parent.fk_column}, registration_id, status) VALUES (?, ?, ?)",
                    (parent_id, reg_id, REGISTERED),
                )
                join_id = cursor.lastrowid
            cursor.execute(
                f"UPDATE {parent.table} SET current_registrations = current_registrations + 1 WHERE id = ?",
                (parent_id,),
            )
            row = cursor.execute(
                f"SELECT * FROM {parent.join_table} WHERE id = ?", (join_id,)
            ).fetchone()
        logger.info(
            "Registration %s enrolled in %s %s", reg_id, parent.label.lower(), parent_id
        )
        return dict(row)

    async def unenroll(
        self,
        parent_id: int,
        registration_id: int,
        parent_kind: ParentKind,
    ) -> None:
        """Remove a registrant from a session or activity.

        Deletes the join-row for the pair and, if it was an active
        enrollment, decrements the parent's counter without letting it
        drop below zero.  Raises ``NotFoundError`` if the registrant was
        not enrolled; the counter is then left untouched.
        """
        parent = PARENTS[ParentKind(parent_kind)]
        with self.db.transaction() as cursor:
            existing = cursor.execute(
                f"SELECT id, status FROM {parent.join_table} WHERE {parent.fk_column} = ? AND registration_id = ?",
                (parent_id, registration_id),
            ).fetchone()
            if not existing:
                raise NotFoundError("Registration not found")
            cursor.execute(f"DELETE FROM {parent.join_table} WHERE id = ?", (existing["id"],))
            if existing["status"] == REGISTERED:
                cursor.execute(
                    f"UPDATE {parent.table} SET current_registrations = MAX(current_registrations - 1, 0) WHERE id = ?",
                    (parent_id,),
                )
        logger.info(
            "Registration %s unenrolled from %s %s", registration_id, parent.label.lower(), parent_id
        )

    async def list_for_registrant(self, registration_id: int) -> Dict[str, List[Dict[str, Any]]]:
        """Return the registrant's sessions and activities.

        Only published sessions and active activities are included.
        Each entry contains the parent's columns plus ``registered_at``
        and ``registration_status`` from the join-row, ordered by date
        and start time.
        """
        result: Dict[str, List[Dict[str, Any]]] = {}
        with self.db.cursor() as cursor:
            for key, kind in (("sessions", ParentKind.SESSION), ("activities", ParentKind.ACTIVITY)):
                parent = PARENTS[kind]
                rows = cursor.execute(
                    f"""
                    SELECT p.*, j.registered_at, j.status AS registration_status
                    FROM {parent.table} p
                    JOIN {parent.join_table} j ON p.id = j.{parent.fk_column}
                    WHERE j.registration_id = ? AND p.status = ?
                    ORDER BY {parent.order_by}
                    """,
                    (registration_id, parent.eligible_status),
                ).fetchall()
                result[key] = [dict(row) for row in rows]
        return result

    @staticmethod
    def release_enrollments(cursor: sqlite3.Cursor, registration_id: int) -> None:
        """Decrement counters for every active enrollment of a registrant.

        Must run inside the transaction that deletes the registration,
        before the join-rows are removed by the cascading delete.
        """
        for parent in PARENTS.values():
            cursor.execute(
                f"""
                UPDATE {parent.table}
                SET current_registrations = MAX(current_registrations - 1, 0)
                WHERE id IN (
                    SELECT {parent.fk_column} FROM {parent.join_table}
                    WHERE registration_id = ? AND status = ?
                )
                """,
                (registration_id, REGISTERED),
            )
