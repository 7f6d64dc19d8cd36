"""Summary statistics over the canonical newest-first record list.

All functions are pure: they read the list they are given and nothing else.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from cardiotrack.core.storage.models import Observation
from cardiotrack.domains.blood_pressure.domain_logic.formatting import to_local


@dataclass(frozen=True)
class Averages:
    """Rounded means of the three metrics."""

    systolic: int
    diastolic: int
    pulse: int

    def to_dict(self) -> dict[str, int]:
        return {"systolic": self.systolic, "diastolic": self.diastolic, "pulse": self.pulse}


@dataclass(frozen=True)
class DailyAverage:
    """Rounded means of all readings taken on one local calendar date."""

    date: date
    systolic: int
    diastolic: int
    pulse: int
    count: int

    def to_dict(self) -> dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "systolic": self.systolic,
            "diastolic": self.diastolic,
            "pulse": self.pulse,
            "count": self.count,
        }


def round_half_up(total: int, count: int) -> int:
    """Round ``total / count`` to the nearest integer, halves away from zero.

    Built-in ``round`` uses banker's rounding (``round(119.5) == 120`` but
    ``round(120.5) == 120``), which is not what a reading average should do.
    """
    return int((Decimal(total) / Decimal(count)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def latest_reading(records: Sequence[Observation]) -> Observation | None:
    """The most recently added reading, or None for an empty list."""
    return records[0] if records else None


def running_averages(records: Sequence[Observation]) -> Averages | None:
    """Means over the whole list; None (not zeros) when the list is empty."""
    if not records:
        return None
    n = len(records)
    return Averages(
        systolic=round_half_up(sum(r.systolic for r in records), n),
        diastolic=round_half_up(sum(r.diastolic for r in records), n),
        pulse=round_half_up(sum(r.pulse for r in records), n),
    )


def daily_averages(
    records: Sequence[Observation],
    tz: tzinfo | None = None,
) -> list[DailyAverage]:
    """Per-day averages, oldest day first."""
    by_day: dict[date, list[Observation]] = {}
    for obs in records:
        by_day.setdefault(to_local(obs.timestamp, tz).date(), []).append(obs)

    result = []
    for day in sorted(by_day):
        readings = by_day[day]
        averages = running_averages(readings)
        result.append(DailyAverage(
            date=day,
            systolic=averages.systolic,
            diastolic=averages.diastolic,
            pulse=averages.pulse,
            count=len(readings),
        ))
    return result
