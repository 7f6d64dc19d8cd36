"""Tests for time-range windows and chart series."""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from cardiotrack.core.storage.models import Observation
from cardiotrack.domains.blood_pressure.domain_logic.formatting import to_epoch_ms
from cardiotrack.domains.blood_pressure.domain_logic.windowing import (
    TimeRange,
    _shift_months,
    chart_series,
    range_cutoff,
    window_records,
)

UTC = timezone.utc
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _obs(id: str, when: datetime, systolic: int = 120, diastolic: int = 80) -> Observation:
    return Observation(
        id=id,
        systolic=systolic,
        diastolic=diastolic,
        pulse=70,
        timestamp=int(when.timestamp() * 1000),
    )


@pytest.fixture
def records():
    # Canonical order: newest first
    return [
        _obs("today", NOW - timedelta(hours=1)),
        _obs("three_days", NOW - timedelta(days=3)),
        _obs("ten_days", NOW - timedelta(days=10)),
    ]


class TestRangeCutoff:
    def test_week(self):
        assert range_cutoff("week", NOW, UTC) == NOW - timedelta(days=7)

    def test_month(self):
        assert range_cutoff(TimeRange.MONTH, NOW, UTC) == datetime(2026, 9, 19, 12, 0, tzinfo=UTC)

    def test_year(self):
        assert range_cutoff("year", NOW, UTC) == datetime(2025, 10, 19, 12, 0, tzinfo=UTC)

    def test_unknown_range(self):
        with pytest.raises(ValueError):
            range_cutoff("decade", NOW, UTC)


class TestShiftMonths:
    def test_clamps_to_last_day(self):
        assert _shift_months(datetime(2026, 3, 31, tzinfo=UTC), 1) == datetime(2026, 2, 28, tzinfo=UTC)

    def test_crosses_year(self):
        assert _shift_months(datetime(2026, 1, 15, tzinfo=UTC), 1) == datetime(2025, 12, 15, tzinfo=UTC)

    def test_leap_day_back_a_year(self):
        assert _shift_months(datetime(2028, 2, 29, tzinfo=UTC), 12) == datetime(2027, 2, 28, tzinfo=UTC)


class TestWindowRecords:
    def test_week_is_oldest_first(self, records):
        window = window_records(records, "week", NOW, UTC)
        assert [r.id for r in window] == ["three_days", "today"]

    def test_month_includes_all(self, records):
        window = window_records(records, "month", NOW, UTC)
        assert [r.id for r in window] == ["ten_days", "three_days", "today"]

    def test_cutoff_is_inclusive(self):
        edge = _obs("edge", NOW - timedelta(days=7))
        assert window_records([edge], "week", NOW, UTC) == [edge]

    def test_ties_keep_insertion_order(self):
        moment = NOW - timedelta(days=1)
        first, second = _obs("first", moment), _obs("second", moment)
        window = window_records([second, first], "week", NOW, UTC)
        assert [r.id for r in window] == ["first", "second"]

    def test_sorts_by_timestamp_not_insertion(self):
        backdated = _obs("backdated", NOW - timedelta(days=5))
        recent = _obs("recent", NOW - timedelta(days=1))
        # backdated was added last, so it is at index 0
        window = window_records([backdated, recent], "week", NOW, UTC)
        assert [r.id for r in window] == ["backdated", "recent"]

    def test_empty(self):
        assert window_records([], "year", NOW, UTC) == []


class TestChartSeries:
    def test_same_membership_and_order_as_window(self, records):
        points = chart_series(records, "month", NOW, UTC)
        assert [p.observation for p in points] == window_records(records, "month", NOW, UTC)

    def test_labels_and_categories(self):
        points = chart_series([_obs("a", NOW, systolic=150, diastolic=85)], "week", NOW, UTC)
        data = points[0].to_dict()
        assert data["date_formatted"] == "Oct 19"
        assert data["category"] == "Stage 2"
        assert data["color"].startswith("#")
        assert data["id"] == "a"


def _new_york():
    try:
        return ZoneInfo("America/New_York")
    except ZoneInfoNotFoundError:
        pytest.skip("IANA time zone data not available")


@pytest.fixture
def new_york_local(monkeypatch):
    """Run with America/New_York as the process's local zone."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() not available on this platform")
    zone = _new_york()
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield zone
    monkeypatch.undo()
    time.tzset()


class TestDaylightSaving:
    # US daylight saving time ends on 2026-11-01
    def test_week_keeps_wall_clock_in_named_zone(self):
        zone = _new_york()
        now = datetime(2026, 11, 5, 12, 0, tzinfo=zone)
        cutoff = range_cutoff("week", now, zone)
        assert (cutoff.month, cutoff.day, cutoff.hour) == (10, 29, 12)
        assert cutoff.utcoffset() == timedelta(hours=-4)

    def test_week_keeps_wall_clock_in_local_zone(self, new_york_local):
        now = datetime(2026, 11, 5, 12, 0, tzinfo=new_york_local)
        cutoff = range_cutoff("week", now)
        assert to_epoch_ms(cutoff) == to_epoch_ms(datetime(2026, 10, 29, 12, 0, tzinfo=new_york_local))

    def test_month_keeps_wall_clock_in_local_zone(self, new_york_local):
        now = datetime(2026, 11, 15, 9, 30, tzinfo=new_york_local)
        cutoff = range_cutoff("month", now)
        assert to_epoch_ms(cutoff) == to_epoch_ms(datetime(2026, 10, 15, 9, 30, tzinfo=new_york_local))

    def test_reading_just_inside_local_week(self, new_york_local):
        now = datetime(2026, 11, 5, 12, 0, tzinfo=new_york_local)
        edge = _obs("edge", datetime(2026, 10, 29, 12, 0, tzinfo=new_york_local))
        early = _obs("early", datetime(2026, 10, 29, 11, 30, tzinfo=new_york_local))
        assert window_records([edge, early], "week", now) == [edge]
