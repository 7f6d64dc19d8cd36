"""MCP tools for entering, listing, deleting, and exporting readings."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from cardiotrack.domains.blood_pressure.domain_logic.validation import ReadingInputError
from cardiotrack.domains.blood_pressure.export.encoder import ExportDecodeError, encode_json

if TYPE_CHECKING:
    from cardiotrack.domains.blood_pressure.app_state import TrackerState

logger = logging.getLogger(__name__)


def register_reading_tools(mcp: FastMCP, state: TrackerState) -> None:
    """Register reading entry and export tools on the MCP server."""

    @mcp.tool
    async def add_reading(
        ctx: Context,
        systolic: str,
        diastolic: str,
        pulse: str,
        date: str = "",
        time: str = "",
        note: str = "",
    ) -> str:
        """Record a blood pressure and pulse reading.

        Args:
            systolic: Systolic pressure in mmHg (top number), e.g. '120'.
            diastolic: Diastolic pressure in mmHg (bottom number), e.g. '80'.
            pulse: Heart rate in beats per minute, e.g. '72'.
            date: Date of the reading (YYYY-MM-DD). Defaults to today.
            time: Local time of the reading (HH:MM, 24h). Defaults to now.
            note: Optional free-text note (e.g. 'after coffee').
        """
        now = datetime.now()
        try:
            obs = state.add_reading(
                systolic,
                diastolic,
                pulse,
                date or now.strftime("%Y-%m-%d"),
                time or now.strftime("%H:%M"),
                note,
            )
        except ReadingInputError as exc:
            logger.info("add_reading rejected: %d invalid field(s)", len(exc.errors))
            return json.dumps({"status": "error", "errors": exc.errors})

        return json.dumps({
            "status": "saved",
            "record": obs.to_dict(),
            "record_count": len(state.records),
        })

    @mcp.tool
    async def delete_reading(ctx: Context, record_id: str) -> str:
        """Delete a reading by id. Deleting an unknown id changes nothing.

        Args:
            record_id: The id returned when the reading was added.
        """
        before = len(state.records)
        remaining = state.delete_reading(record_id)
        return json.dumps({
            "status": "ok",
            "deleted": len(remaining) < before,
            "record_count": len(remaining),
        })

    @mcp.tool
    async def list_readings(ctx: Context, limit: int = 0) -> str:
        """List readings, most recently added first.

        Args:
            limit: Maximum number of readings to return (0 = all).
        """
        records = state.records
        if limit > 0:
            records = records[:limit]
        return json.dumps({
            "status": "ok",
            "total": len(state.records),
            "records": [r.to_dict() for r in records],
        })

    @mcp.tool
    async def export_csv(ctx: Context) -> str:
        """Export all readings as CSV, with a dated filename."""
        filename, text = state.export_csv()
        return json.dumps({"status": "ok", "filename": filename, "csv": text})

    @mcp.tool
    async def export_json(ctx: Context) -> str:
        """Export all readings as a full-fidelity JSON backup."""
        return encode_json(state.records)

    @mcp.tool
    async def import_json(ctx: Context, data: str) -> str:
        """Replace all readings with a JSON backup produced by export_json.

        Args:
            data: The JSON text of a previous export.
        """
        try:
            records = state.import_json(data)
        except ExportDecodeError as exc:
            logger.warning("import_json rejected, records unchanged: %s", exc)
            return json.dumps({"status": "error", "message": str(exc)})
        return json.dumps({"status": "ok", "record_count": len(records)})
