"""MCP tool for reviewing the audit trail.

The trail holds no readings: only which operation ran, how many records
were involved, and where data was sent when it left the device.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from cardiotrack.core.audit.logger import AuditLogger


def register_audit_tools(mcp: FastMCP, audit_logger: AuditLogger) -> None:
    """Register audit trail tools on the MCP server."""

    @mcp.tool
    async def audit_trail(ctx: Context, limit: int = 20, action: str = "") -> str:
        """Recent store changes and data disclosures (sync pushes, insight requests).

        Args:
            limit: Maximum number of events to return.
            action: Optional filter, e.g. 'sync_push' or 'insight_request'.
        """
        events = audit_logger.get_recent_events(limit=limit, action=action or None)
        return json.dumps({
            "status": "ok",
            "disclosures": audit_logger.count_disclosures(),
            "events": [
                {
                    "timestamp": e["timestamp"],
                    "action": e["action"],
                    "record_count": e["record_count"],
                    "destination": e["destination"],
                    "data_disclosed": e["data_disclosed"],
                    "status": e["status"],
                }
                for e in events
            ],
        }, indent=2)
