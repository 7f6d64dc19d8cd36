"""Tests for blood pressure classification and status levels."""

from __future__ import annotations

import pytest

from cardiotrack.core.storage.models import Observation
from cardiotrack.domains.blood_pressure.domain_logic.classification import (
    CATEGORY_COLORS,
    BPCategory,
    category_distribution,
    classify,
    status_level,
)


class TestClassify:
    @pytest.mark.parametrize("systolic, diastolic, expected", [
        (125, 95, BPCategory.STAGE_2),
        (119, 79, BPCategory.NORMAL),
        (121, 79, BPCategory.ELEVATED),
        (185, 100, BPCategory.CRISIS),
        (120, 130, BPCategory.CRISIS),
        (181, 60, BPCategory.CRISIS),
        (180, 120, BPCategory.STAGE_2),
        (140, 70, BPCategory.STAGE_2),
        (110, 90, BPCategory.STAGE_2),
        (130, 70, BPCategory.STAGE_1),
        (115, 80, BPCategory.STAGE_1),
        (125, 85, BPCategory.STAGE_1),
        (120, 79, BPCategory.ELEVATED),
        (129, 60, BPCategory.ELEVATED),
        (90, 60, BPCategory.NORMAL),
    ])
    def test_priority_order(self, systolic, diastolic, expected):
        assert classify(systolic, diastolic) is expected

    def test_labels(self):
        assert [c.value for c in BPCategory] == [
            "Crisis/Severe", "Stage 2", "Stage 1", "Elevated", "Normal",
        ]

    def test_every_category_has_a_color(self):
        assert set(CATEGORY_COLORS) == set(BPCategory)


class TestDistribution:
    def test_counts_all_categories(self):
        records = [
            Observation(id="a", systolic=118, diastolic=75, pulse=60, timestamp=1),
            Observation(id="b", systolic=125, diastolic=95, pulse=60, timestamp=2),
            Observation(id="c", systolic=145, diastolic=85, pulse=60, timestamp=3),
        ]
        distribution = category_distribution(records)
        assert distribution[BPCategory.STAGE_2] == 2
        assert distribution[BPCategory.NORMAL] == 1
        assert distribution[BPCategory.CRISIS] == 0
        assert list(distribution) == list(BPCategory)

    def test_empty(self):
        assert all(n == 0 for n in category_distribution([]).values())


class TestStatusLevel:
    @pytest.mark.parametrize("systolic, diastolic, expected", [
        (141, 70, "high"),
        (120, 91, "high"),
        (140, 90, "elevated"),
        (121, 70, "elevated"),
        (120, 81, "elevated"),
        (120, 80, "normal"),
    ])
    def test_levels(self, systolic, diastolic, expected):
        assert status_level(systolic, diastolic) == expected
