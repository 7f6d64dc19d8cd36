"""SQLite persistence for the CardioTrack local store.

The store is deliberately small: a keyed blob table holding one JSON (or
encrypted) document per key, and the audit log. Schema changes are applied
as numbered migrations, each recorded in ``schema_version``.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

_BLOBS_TABLE = """
CREATE TABLE IF NOT EXISTS blobs (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

# No reading values are ever written here; see AuditLogger
_AUDIT_TABLE = """
CREATE TABLE IF NOT EXISTS audit_log (
    id             TEXT PRIMARY KEY,
    timestamp      TEXT NOT NULL DEFAULT (datetime('now')),
    action         TEXT NOT NULL,
    record_id      TEXT,
    record_count   INTEGER,
    destination    TEXT,
    data_disclosed INTEGER DEFAULT 0,
    duration_ms    REAL,
    status         TEXT NOT NULL DEFAULT 'success',
    error_type     TEXT
);
CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log(timestamp);
CREATE INDEX IF NOT EXISTS idx_audit_action    ON audit_log(action);
"""

# (version, description, DDL), applied in order
_MIGRATIONS: tuple[tuple[int, str, str], ...] = (
    (1, "keyed blob table", _BLOBS_TABLE),
    (2, "audit log", _AUDIT_TABLE),
)

SCHEMA_VERSION = _MIGRATIONS[-1][0]


class DatabaseError(Exception):
    """Raised when the local store cannot be opened, read, or written."""


class TrackerDatabase:
    """Connection owner for the CardioTrack SQLite file.

    ``":memory:"`` gives a throwaway database, which the tests use.

    Usage::

        with TrackerDatabase("~/.cardiotrack/cardiotrack.db") as db:
            db.put_blob("cardiotrack_settings_v1", "{}")
            db.get_blob("cardiotrack_settings_v1")
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection.

        Raises:
            DatabaseError: If :meth:`initialize` has not been called, or the
                database was closed.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Open the connection and apply pending migrations. Calling it again is a no-op."""
        if self._conn is not None:
            return

        target = self._db_path
        if target != ":memory:":
            path = Path(target).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            target = str(path)

        try:
            self._conn = sqlite3.connect(target)
        except sqlite3.Error as exc:
            raise DatabaseError(f"Cannot open database {self._db_path!r}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")

        self._migrate()
        logger.info("Tracker database initialized: %s", self._db_path)

    def _migrate(self) -> None:
        conn = self.connection
        conn.executescript(_VERSION_TABLE)
        current = self.get_schema_version()
        for version, description, ddl in _MIGRATIONS:
            if version <= current:
                continue
            conn.executescript(ddl)
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
            conn.commit()
            logger.info("Applied schema migration V%d: %s", version, description)

    def get_schema_version(self) -> int:
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] or 0

    # ------------------------------------------------------------------
    # Keyed blobs
    # ------------------------------------------------------------------

    def get_blob(self, key: str) -> str | None:
        """Stored text for ``key``; None if the key was never written."""
        row = self.connection.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
        return None if row is None else row["value"]

    def put_blob(self, key: str, value: str) -> None:
        """Replace the text stored under ``key``.

        A single upsert, committed before returning: readers see either the
        old document or the new one, never a mix.

        Raises:
            DatabaseError: If the write fails; the previous value is kept.
        """
        conn = self.connection
        try:
            conn.execute(
                "INSERT INTO blobs (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (key, value, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise DatabaseError(f"Failed to write blob {key!r}: {exc}") from exc

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Tracker database closed")

    def __enter__(self) -> TrackerDatabase:
        self.initialize()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
