"""MCP tools for derived views: dashboard, categories, chart series, daily averages."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from cardiotrack.domains.blood_pressure.domain_logic.analytics import daily_averages
from cardiotrack.domains.blood_pressure.domain_logic.classification import (
    CATEGORY_COLORS,
    category_distribution,
    classify,
)
from cardiotrack.domains.blood_pressure.domain_logic.windowing import (
    TimeRange,
    window_records,
)

if TYPE_CHECKING:
    from cardiotrack.domains.blood_pressure.app_state import TrackerState

logger = logging.getLogger(__name__)

_RANGE_NAMES = [r.value for r in TimeRange]


def register_analytics_tools(mcp: FastMCP, state: TrackerState) -> None:
    """Register read-only analytics tools on the MCP server."""

    @mcp.tool
    async def dashboard(ctx: Context) -> str:
        """Latest reading with its category, running averages, and recent history."""
        return json.dumps({"status": "ok", **state.dashboard()}, indent=2)

    @mcp.tool
    async def classify_reading(ctx: Context, systolic: int, diastolic: int) -> str:
        """Classify a blood pressure reading (Normal, Elevated, Stage 1, Stage 2, Crisis/Severe).

        Args:
            systolic: Systolic pressure in mmHg.
            diastolic: Diastolic pressure in mmHg.
        """
        category = classify(systolic, diastolic)
        return json.dumps({
            "status": "ok",
            "systolic": systolic,
            "diastolic": diastolic,
            "category": category.value,
            "color": CATEGORY_COLORS[category],
        })

    @mcp.tool
    async def chart_series(ctx: Context, time_range: str = "week") -> str:
        """Readings within a time range, oldest first, for trend and distribution charts.

        Args:
            time_range: 'week', 'month', or 'year'.
        """
        if time_range not in _RANGE_NAMES:
            logger.info("chart_series called with unknown range %r", time_range)
            return json.dumps({
                "status": "error",
                "message": f"Unknown time range {time_range!r}; use one of {_RANGE_NAMES}",
            })
        points = state.chart(time_range)
        distribution = category_distribution(p.observation for p in points)
        return json.dumps({
            "status": "ok",
            "time_range": time_range,
            "points": [p.to_dict() for p in points],
            "distribution": {c.value: n for c, n in distribution.items()},
        })

    @mcp.tool
    async def daily_average_series(ctx: Context, time_range: str = "month") -> str:
        """Per-day average readings within a time range, oldest day first.

        Args:
            time_range: 'week', 'month', or 'year'.
        """
        if time_range not in _RANGE_NAMES:
            logger.info("daily_average_series called with unknown range %r", time_range)
            return json.dumps({
                "status": "error",
                "message": f"Unknown time range {time_range!r}; use one of {_RANGE_NAMES}",
            })
        windowed = window_records(state.records, time_range)
        return json.dumps({
            "status": "ok",
            "time_range": time_range,
            "days": [d.to_dict() for d in daily_averages(windowed)],
        })
