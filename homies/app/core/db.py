"""
SQLite database integration.

This module provides the ``Database`` storage handle used by the
services, and ``init_db`` which creates the schema on start.  A
``Database`` wraps a single ``sqlite3`` connection; services receive
it through their constructor, so tests can hand them an in‑memory
database and the application can hand them a file‑backed one.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"

DEFAULT_EVENT_TYPES = ("Animals", "Fun", "Discussion", "Work")

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    user_name TEXT NOT NULL UNIQUE,
    email TEXT
);

CREATE TABLE IF NOT EXISTS types (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

-- organiser_id has no REFERENCES clause: identities are
-- managed outside this database and may be missing from ``users``.
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT NOT NULL,
    organiser_id TEXT NOT NULL,
    created_on TIMESTAMP NOT NULL,
    start_time TIMESTAMP NOT NULL,
    end_time TIMESTAMP NOT NULL,
    type_id INTEGER NOT NULL,
    FOREIGN KEY(type_id) REFERENCES types(id)
);

CREATE TABLE IF NOT EXISTS events_participants (
    event_id INTEGER NOT NULL,
    helper_id TEXT NOT NULL,
    PRIMARY KEY(event_id, helper_id),
    FOREIGN KEY(event_id) REFERENCES events(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS audit_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT,
    action TEXT NOT NULL,
    object_type TEXT,
    object_id INTEGER,
    timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    details TEXT
);

CREATE INDEX IF NOT EXISTS idx_events_organiser_id ON events(organiser_id);
CREATE INDEX IF NOT EXISTS idx_events_participants_helper_id ON events_participants(helper_id);
CREATE INDEX IF NOT EXISTS idx_audit_logs_object ON audit_logs(object_type, object_id);
"""


def get_database_path(database_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    ``:memory:`` and absolute paths are returned as is.  Otherwise the
    path is resolved relative to the project root.
    """
    db_url = database_url or settings.database_url
    if db_url == MEMORY_DATABASE or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent  # project root
    return str((base_dir / db_url).resolve())


class Database:
    """Storage handle wrapping one SQLite connection.

    Rows are returned as ``sqlite3.Row`` objects so columns can be
    accessed by name.  No type detection is enabled: timestamps come
    back as the ISO strings they were stored as and are parsed by the
    pydantic schemas.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection
        self.connection.row_factory = sqlite3.Row
        # Foreign key support is off by default in SQLite and must be
        # enabled per connection.
        self.connection.execute("PRAGMA foreign_keys = ON")

    @classmethod
    def connect(cls, database_url: Optional[str] = None) -> "Database":
        """Open a connection to the configured (or given) database."""
        db_path = get_database_path(database_url)
        logger.debug("Opening database %s", db_path)
        return cls(sqlite3.connect(db_path))

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside a transaction.

        The transaction is committed when the block exits normally and
        rolled back if it raises; the exception is re‑raised.
        """
        cursor = self.connection.cursor()
        try:
            yield cursor
            self.connection.commit()
        except Exception:
            self.connection.rollback()
            raise
        finally:
            cursor.close()

    def close(self) -> None:
        self.connection.close()


def init_db(db: Database, seed_types: Optional[bool] = None) -> None:
    """Create the schema if it does not exist.

    When ``seed_types`` is true (defaults to ``settings.seed_event_types``)
    the default event categories are inserted; existing categories are
    left untouched.
    """
    if seed_types is None:
        seed_types = settings.seed_event_types

    db.connection.executescript(SCHEMA)
    if seed_types:
        with db.cursor() as cursor:
            cursor.executemany(
                "INSERT OR IGNORE INTO types (name) VALUES (?)",
                [(name,) for name in DEFAULT_EVENT_TYPES],
            )
    logger.info("Database schema ready (seed_types=%s)", seed_types)
