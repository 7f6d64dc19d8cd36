"""MCP tools for the spreadsheet sync: settings, push, and webhook script."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from cardiotrack.core.storage.models import AppSettings
from cardiotrack.domains.blood_pressure.app_state import SyncNotConfiguredError
from cardiotrack.domains.blood_pressure.sync.sheet_script import sheet_script_template

if TYPE_CHECKING:
    from cardiotrack.domains.blood_pressure.app_state import TrackerState

logger = logging.getLogger(__name__)


def register_sync_tools(mcp: FastMCP, state: TrackerState) -> None:
    """Register sync configuration and push tools on the MCP server."""

    @mcp.tool
    async def get_sync_settings(ctx: Context) -> str:
        """Show the configured sync endpoint and the time of the last successful sync."""
        return json.dumps({
            "status": "ok",
            **state.settings.to_dict(),
            "sync_status": state.sync_status.value,
        })

    @mcp.tool
    async def save_sync_settings(ctx: Context, google_sheet_url: str) -> str:
        """Save the spreadsheet web app URL that receives sync pushes.

        Args:
            google_sheet_url: The deployed Apps Script web app URL.
        """
        updated = state.save_settings(AppSettings(google_sheet_url=google_sheet_url.strip()))
        return json.dumps({"status": "saved", **updated.to_dict()})

    @mcp.tool
    async def sync_now(ctx: Context) -> str:
        """Push every reading to the configured spreadsheet (full overwrite)."""
        try:
            result = await state.sync()
        except SyncNotConfiguredError:
            logger.info("sync_now called before a sync endpoint was saved")
            return json.dumps({
                "status": "not_configured",
                "message": "Save a sync endpoint with save_sync_settings first.",
            })
        if result is None:
            logger.info("sync_now result superseded by a newer push")
            return json.dumps({"status": "superseded"})
        return json.dumps({
            "status": "ok",
            "result": result.value,
            "record_count": len(state.records),
            **state.settings.to_dict(),
        })

    @mcp.tool
    async def sync_script(ctx: Context) -> str:
        """Google Apps Script to deploy as the sync endpoint."""
        return sheet_script_template()
