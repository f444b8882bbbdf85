"""
SQLite database integration and simple migration system.

The ``Database`` handle is created once by ``create_app`` and shared by
every request handler.  It hands out short‑lived connections
(``connect``), wraps write sequences in an exclusive transaction
(``transaction``) and applies migrations on application start
(``init_db``).  To switch to another DBMS you would replace the
connection logic and adapt SQL syntax accordingly.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Sequence

from .config import Settings, settings as default_settings


logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS registrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            organization TEXT,
            phone TEXT,
            position TEXT,
            country TEXT,
            registration_type TEXT,
            special_requirements TEXT,
            payment_proof_url TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        -- Sessions and activities are managed by the event-management
        -- subsystem; this service only reads them and maintains
        -- current_registrations.
        CREATE TABLE IF NOT EXISTS sessions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            description TEXT,
            date TEXT,
            start_time TEXT,
            end_time TEXT,
            location TEXT,
            capacity INTEGER,
            current_registrations INTEGER NOT NULL DEFAULT 0,
            status TEXT NOT NULL DEFAULT 'draft',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS activities (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT,
            date TEXT,
            time TEXT,
            location TEXT,
            capacity INTEGER,
            current_registrations INTEGER NOT NULL DEFAULT 0,
            status TEXT NOT NULL DEFAULT 'inactive',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS session_registrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            session_id INTEGER NOT NULL,
            registration_id INTEGER NOT NULL,
            status TEXT NOT NULL DEFAULT 'registered',
            registered_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(session_id, registration_id),
            FOREIGN KEY(session_id) REFERENCES sessions(id) ON DELETE CASCADE,
            FOREIGN KEY(registration_id) REFERENCES registrations(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS activity_registrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            activity_id INTEGER NOT NULL,
            registration_id INTEGER NOT NULL,
            status TEXT NOT NULL DEFAULT 'registered',
            registered_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(activity_id, registration_id),
            FOREIGN KEY(activity_id) REFERENCES activities(id) ON DELETE CASCADE,
            FOREIGN KEY(registration_id) REFERENCES registrations(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: form submission audit table and lookup indices
    (
        2,
        """
        -- Mirrors the review status of submitted forms.  Optional: the
        -- registration service keeps working when this table is absent.
        CREATE TABLE IF NOT EXISTS form_submissions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            form_type TEXT NOT NULL,
            entity_id INTEGER NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending',
            data TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_registrations_status ON registrations(status);
        CREATE INDEX IF NOT EXISTS idx_registrations_created_at ON registrations(created_at);
        CREATE INDEX IF NOT EXISTS idx_session_registrations_registration_id
            ON session_registrations(registration_id);
        CREATE INDEX IF NOT EXISTS idx_activity_registrations_registration_id
            ON activity_registrations(registration_id);
        CREATE INDEX IF NOT EXISTS idx_form_submissions_entity
            ON form_submissions(form_type, entity_id);
        """,
    ),
]

# Largest value an INTEGER column (and so a row id) can hold.
SQLITE_MAX_INT = 2**63 - 1

# Bound parameters per ``IN (...)`` list, well below SQLite's
# SQLITE_MAX_VARIABLE_NUMBER on every supported version.
MAX_IN_PARAMETERS = 500


def chunked(values: Sequence[Any], size: int = MAX_IN_PARAMETERS) -> Iterator[Sequence[Any]]:
    """Yield consecutive slices of ``values`` holding at most ``size`` items."""
    for start in range(0, len(values), size):
        yield values[start:start + size]


def get_database_path(db_url: str) -> str:
    """Compute the path to the SQLite database file.

    If ``db_url`` is an absolute path (or the in‑memory marker), use it
    directly.  Otherwise resolve it relative to the project root.
    """
    if db_url == ":memory:" or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


class Database:
    """Process‑scoped handle to the relational store.

    Holds the location and lock timeout of the SQLite database.  Each
    call to ``connect`` returns a fresh connection, so the handle can be
    shared by concurrent requests without further locking.
    """

    def __init__(self, path: str, timeout: float = 10.0) -> None:
        self.path = path
        self.timeout = timeout

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "Database":
        config = config or default_settings
        return cls(get_database_path(config.database_url), timeout=config.db_timeout)

    def connect(self) -> sqlite3.Connection:
        """Create and return a new SQLite connection.

        The connection runs in autocommit mode (``isolation_level=None``)
        so that transactions are opened explicitly by ``transaction``.
        Rows are returned as ``sqlite3.Row`` to access columns by name.
        """
        conn = sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        # Foreign key support is disabled by default in SQLite and must
        # be turned on per connection.
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside an exclusive write transaction.

        ``BEGIN IMMEDIATE`` takes the database write lock before the
        first read, so check‑then‑write sequences executed through the
        cursor cannot interleave with another writer.  The transaction
        is committed on normal exit and rolled back on any exception.
        """
        conn = self.connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn.cursor()
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Context manager that yields an autocommit cursor for reads and single statements."""
        conn = self.connect()
        try:
            yield conn.cursor()
        finally:
            conn.close()

    def init_db(self) -> None:
        """Initialise the database and apply pending migrations.

        Creates the ``migrations`` table if it does not exist, checks the
        current schema version, and applies any new migrations defined in
        ``MIGRATIONS``.  If you add a migration, append it with an
        incremented version number.
        """
        with self.cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) as version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    cursor.executescript(sql)
                    cursor.execute(
                        "INSERT INTO migrations (version) VALUES (?)", (version,)
                    )
                    logger.info("Applied database migration %s", version)
                    current_version = version
