"""
Service layer for registration statistics.

Provides the aggregate counts shown on the administrators' review
dashboard.  All queries are read‑only.
"""

from __future__ import annotations

from typing import Any, Dict

from conference_api.app.core.db import Database


class StatisticsService:
    """Service providing aggregated registration statistics."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def overview(self) -> Dict[str, Any]:
        """Return registration counts by status and by type.

        ``overview`` holds the total, one count per review status (the
        initial ``pending`` status is reported as ``submitted``) and
        ``new_this_week``, the registrations created during the last
        seven days.  ``by_type`` lists ``registration_type`` counts in
        descending order, ignoring registrations without a type.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                """
                SELECT
                    COUNT(*) AS total_registrations,
                    COUNT(CASE WHEN status = 'pending' THEN 1 END) AS submitted,
                    COUNT(CASE WHEN status = 'under_review' THEN 1 END) AS under_review,
                    COUNT(CASE WHEN status = 'approved' THEN 1 END) AS approved,
                    COUNT(CASE WHEN status = 'rejected' THEN 1 END) AS rejected,
                    COUNT(CASE WHEN status = 'waitlist' THEN 1 END) AS waitlist,
                    COUNT(CASE WHEN status = 'cancelled' THEN 1 END) AS cancelled,
                    COUNT(CASE WHEN created_at >= datetime('now', '-7 days') THEN 1 END) AS new_this_week
                FROM registrations
                """
            ).fetchone()
            type_rows = cursor.execute(
                """
                SELECT registration_type, COUNT(*) AS count
                FROM registrations
                WHERE registration_type IS NOT NULL
                GROUP BY registration_type
                ORDER BY count DESC, registration_type ASC
                """
            ).fetchall()
        return {
            "overview": dict(row),
            "by_type": [dict(r) for r in type_rows],
        }
