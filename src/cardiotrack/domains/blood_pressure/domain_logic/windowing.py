"""Time-range windows over the record list, for trend and distribution charts.

A range is a rolling window anchored to "now" and measured in local
calendar units. Nothing is cached; callers re-evaluate whenever the range or
the record list changes.
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import Enum
from typing import Any

from cardiotrack.core.storage.models import Observation
from cardiotrack.domains.blood_pressure.domain_logic.classification import (
    CATEGORY_COLORS,
    BPCategory,
    classify_observation,
)
from cardiotrack.domains.blood_pressure.domain_logic.formatting import (
    format_chart_label,
    to_epoch_ms,
)


class TimeRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def _shift_months(moment: datetime, months: int) -> datetime:
    """Move back ``months`` calendar months, clamping to the last valid day."""
    index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def range_cutoff(
    time_range: TimeRange | str,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> datetime:
    """Earliest instant included in ``time_range``.

    The range is measured in wall-clock calendar units, so a week that
    spans a daylight-saving change still starts at the same local time of
    day as ``now``.

    Args:
        time_range: 'week' (7 days), 'month' (1 calendar month) or 'year'.
        now: Anchor instant. Defaults to the current time.
        tz: Zone whose calendar is used. Defaults to the local zone.

    Raises:
        ValueError: For an unknown range name.
    """
    time_range = TimeRange(time_range)
    if tz is None:
        # Naive local wall clock; astimezone() below applies the offset in force at the cutoff
        anchor = (now or datetime.now()).astimezone().replace(tzinfo=None)
    else:
        anchor = (now or datetime.now(tz)).astimezone(tz)

    if time_range is TimeRange.WEEK:
        cutoff = anchor - timedelta(days=7)
    elif time_range is TimeRange.MONTH:
        cutoff = _shift_months(anchor, 1)
    else:
        cutoff = _shift_months(anchor, 12)
    return cutoff.astimezone() if tz is None else cutoff


def window_records(
    records: Sequence[Observation],
    time_range: TimeRange | str,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[Observation]:
    """Records at or after the range cutoff, oldest first.

    Ties on timestamp keep the order in which the readings were added.
    """
    cutoff_ms = to_epoch_ms(range_cutoff(time_range, now, tz))
    oldest_first = list(reversed(records))
    return sorted(
        (r for r in oldest_first if r.timestamp >= cutoff_ms),
        key=lambda r: r.timestamp,
    )


@dataclass(frozen=True)
class ChartPoint:
    """A windowed reading decorated for display."""

    observation: Observation
    label: str
    category: BPCategory

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.observation.to_dict(),
            "date_formatted": self.label,
            "category": self.category.value,
            "color": CATEGORY_COLORS[self.category],
        }


def chart_series(
    records: Sequence[Observation],
    time_range: TimeRange | str,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[ChartPoint]:
    """Windowed readings with short date labels; same membership and order as the window."""
    return [
        ChartPoint(
            observation=obs,
            label=format_chart_label(obs.timestamp, tz),
            category=classify_observation(obs),
        )
        for obs in window_records(records, time_range, now, tz)
    ]
