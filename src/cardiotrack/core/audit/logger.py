"""Audit logger: PHI-free trail of store mutations and outbound disclosures.

Every time readings leave the device (a sync push to the spreadsheet
webhook, a narrative insight request to an LLM provider) an entry records
where they went and how many records were sent. Readings themselves are
never written to the audit log.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlsplit

from cardiotrack.core.storage.database import TrackerDatabase

logger = logging.getLogger(__name__)


@dataclass
class AuditEvent:
    """A single audit log entry."""

    action: str                      # 'record_add' | 'record_delete' | 'records_import' | 'sync_push' | 'insight_request'
    record_id: str | None = None
    record_count: int | None = None
    destination: str | None = None   # host of the webhook, or LLM provider name
    data_disclosed: bool = False     # True if readings were sent off-device
    duration_ms: float | None = None
    status: str = "success"          # 'success' | 'failure'
    error_type: str | None = None


def _host_only(url: str) -> str:
    """Strip path and query from a webhook URL; deployment ids live in the path."""
    return urlsplit(url).netloc or url


class AuditLogger:
    """Records audit events to the ``audit_log`` SQLite table.

    Writes are committed immediately. A failed write is logged and
    swallowed so auditing never breaks the operation being audited.

    Usage::

        audit = AuditLogger(db)
        audit.log_disclosure("sync_push", destination=url, record_count=12)
    """

    def __init__(self, database: TrackerDatabase) -> None:
        self._db = database

    def log_event(self, event: AuditEvent) -> str:
        """Insert an audit event and return its id (empty string if the write failed)."""
        event_id = str(uuid.uuid4())
        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO audit_log
                   (id, timestamp, action, record_id, record_count, destination,
                    data_disclosed, duration_ms, status, error_type)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    event_id,
                    datetime.now(timezone.utc).isoformat(),
                    event.action,
                    event.record_id,
                    event.record_count,
                    event.destination,
                    1 if event.data_disclosed else 0,
                    event.duration_ms,
                    event.status,
                    event.error_type,
                ),
            )
            conn.commit()
        except Exception:
            logger.exception("Failed to write audit event %s; event lost", event.action)
            return ""
        return event_id

    def log_mutation(
        self,
        action: str,
        *,
        record_id: str | None = None,
        record_count: int | None = None,
    ) -> str:
        return self.log_event(AuditEvent(
            action=action, record_id=record_id, record_count=record_count,
        ))

    def log_disclosure(
        self,
        action: str,
        *,
        destination: str,
        record_count: int,
        duration_ms: float | None = None,
        status: str = "success",
        error_type: str | None = None,
    ) -> str:
        """Log readings leaving the device.

        Args:
            action: 'sync_push' or 'insight_request'.
            destination: Webhook URL (reduced to its host) or provider name.
            record_count: Number of readings included in the request.
            duration_ms: Round-trip time.
            status: 'success' or 'failure'.
            error_type: Exception class name on failure.
        """
        return self.log_event(AuditEvent(
            action=action,
            record_count=record_count,
            destination=_host_only(destination),
            data_disclosed=True,
            duration_ms=duration_ms,
            status=status,
            error_type=error_type,
        ))

    def get_recent_events(self, limit: int = 50, action: str | None = None) -> list[dict[str, Any]]:
        """Return the newest audit events first, optionally filtered by action."""
        query = "SELECT * FROM audit_log"
        params: list[Any] = []
        if action:
            query += " WHERE action = ?"
            params.append(action)
        query += " ORDER BY timestamp DESC, rowid DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        events = []
        for row in rows:
            event = dict(row)
            event["data_disclosed"] = bool(event["data_disclosed"])
            events.append(event)
        return events

    def count_disclosures(self) -> int:
        row = self._db.connection.execute(
            "SELECT COUNT(*) FROM audit_log WHERE data_disclosed = 1"
        ).fetchone()
        return row[0]
