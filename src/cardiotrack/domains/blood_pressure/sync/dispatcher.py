"""Sync dispatcher: pushes the full record set to a spreadsheet webhook.

Each push is a complete snapshot (the endpoint overwrites its sheet), sent
as one POST with no retry. The response is never read: success only means
the request completed without a transport-level error.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Sequence
from datetime import tzinfo
from enum import Enum
from typing import Any

import httpx

from cardiotrack.core.storage.models import Observation
from cardiotrack.domains.blood_pressure.domain_logic.formatting import format_date, format_time

logger = logging.getLogger(__name__)


class SyncResult(str, Enum):
    """Outcome of a push. The wire protocol supports nothing richer."""

    DELIVERED = "delivered"
    FAILED = "failed"


def build_sync_payload(records: Sequence[Observation], tz: tzinfo | None = None) -> list[dict[str, Any]]:
    """Rows for the sheet, in canonical (newest-first) order, with display date/time."""
    return [
        {
            "id": r.id,
            "date": format_date(r.timestamp, tz),
            "time": format_time(r.timestamp, tz),
            "systolic": r.systolic,
            "diastolic": r.diastolic,
            "pulse": r.pulse,
            "note": r.note or "",
        }
        for r in records
    ]


class SyncDispatcher:
    """Single-attempt HTTP push of the record set.

    Usage::

        dispatcher = SyncDispatcher()
        result = await dispatcher.push(settings.google_sheet_url, store.list())
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        """
        Args:
            timeout: Seconds before giving up; None waits indefinitely.
            transport: Custom httpx transport (tests use ``httpx.MockTransport``).
            tz: Zone used to render the date/time columns.
        """
        self._timeout = timeout
        self._transport = transport
        self._tz = tz

    async def push(self, url: str, records: Sequence[Observation]) -> SyncResult:
        body = json.dumps(build_sync_payload(records, self._tz))
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                async with client.stream(
                    "POST",
                    url,
                    content=body,
                    headers={"Content-Type": "application/json"},
                ) as response:
                    # Body deliberately left unread; the status code is informational only.
                    logger.debug("Sync endpoint answered HTTP %d", response.status_code)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error(
                "Sync push of %d records failed: %s: %s",
                len(records),
                type(exc).__name__,
                exc,
            )
            return SyncResult.FAILED

        logger.info(
            "Sync push delivered %d records in %.0fms",
            len(records),
            (time.monotonic() - start) * 1000,
        )
        return SyncResult.DELIVERED
