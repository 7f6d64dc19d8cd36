"""MCP tools for the narrative trend insight."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from cardiotrack.domains.blood_pressure.app_state import MIN_RECORDS_FOR_INSIGHT

if TYPE_CHECKING:
    from cardiotrack.domains.blood_pressure.app_state import TrackerState

logger = logging.getLogger(__name__)


def register_insight_tools(mcp: FastMCP, state: TrackerState) -> None:
    """Register the narrative insight tool on the MCP server."""

    @mcp.tool
    async def analyze_trends(ctx: Context) -> str:
        """Short AI-written summary of recent readings with one practical tip.

        Sends the 20 most recent readings (date, blood pressure, pulse) to the
        configured LLM provider. Advisory only; not medical advice.
        """
        if not state.insights_available:
            return json.dumps({
                "status": "unavailable",
                "message": f"At least {MIN_RECORDS_FOR_INSIGHT} readings are needed for an analysis.",
            })
        outcome = await state.request_insight()
        if outcome is None:
            logger.info("analyze_trends response superseded by a newer request")
            return json.dumps({"status": "superseded"})
        if outcome.failed:
            logger.warning("analyze_trends returned the fallback text")
        return json.dumps({
            "status": "error" if outcome.failed else "ok",
            "analysis": outcome.text,
            "records_analyzed": outcome.record_count,
        })
