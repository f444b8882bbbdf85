"""
Best‑effort mirroring of registration status into ``form_submissions``.

Some deployments keep a generic ``form_submissions`` table that tracks
every submitted form.  When a registration's review status changes the
matching submission rows are updated too.  The table is optional, so
this step never fails the caller: the outcome is returned as a
``SyncResult`` that callers only log.
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Iterable, Optional

from conference_api.app.core.db import Database, chunked


logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    ok: bool
    updated: int = 0
    error: Optional[str] = None


class FormSubmissionSync:
    """Update submission rows of type ``registration`` for given entity ids."""

    form_type = "registration"

    def __init__(self, db: Database) -> None:
        self.db = db

    def sync_status(self, entity_ids: Iterable[int], status: str) -> SyncResult:
        ids = list(entity_ids)
        if not ids:
            return SyncResult(ok=True)
        updated = 0
        try:
            with self.db.transaction() as cursor:
                for chunk in chunked(ids):
                    placeholders = ",".join("?" for _ in chunk)
                    cursor.execute(
                        f"""
                        UPDATE form_submissions SET status = ?, updated_at = CURRENT_TIMESTAMP
                        WHERE form_type = ? AND entity_id IN ({placeholders})
                        """,
                        (status, self.form_type, *chunk),
                    )
                    updated += cursor.rowcount
            return SyncResult(ok=True, updated=updated)
        except sqlite3.Error as exc:
            return SyncResult(ok=False, error=str(exc))


def log_sync_result(result: SyncResult, entity_ids: Iterable[int]) -> None:
    """Log the outcome of a form submission sync."""
    if result.ok:
        logger.debug("Form submissions synced for %s (%s rows)", list(entity_ids), result.updated)
    else:
        logger.warning("Form submissions update skipped for %s: %s", list(entity_ids), result.error)
