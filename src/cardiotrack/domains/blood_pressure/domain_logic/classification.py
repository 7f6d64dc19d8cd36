"""Clinical blood pressure categories.

Rules are evaluated strictly in order and the first match wins, so a
stricter rule is never overridden by a looser one further down. For
example 125/95 is Stage 2 (diastolic >= 90), not Elevated.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum

from cardiotrack.core.storage.models import Observation


class BPCategory(str, Enum):
    """Clinical category of a single reading, most severe first."""

    CRISIS = "Crisis/Severe"
    STAGE_2 = "Stage 2"
    STAGE_1 = "Stage 1"
    ELEVATED = "Elevated"
    NORMAL = "Normal"


# (predicate over systolic/diastolic, category) in priority order
_RULES: tuple[tuple[Callable[[int, int], bool], BPCategory], ...] = (
    (lambda sys, dia: sys > 180 or dia > 120, BPCategory.CRISIS),
    (lambda sys, dia: sys >= 140 or dia >= 90, BPCategory.STAGE_2),
    (lambda sys, dia: sys >= 130 or dia >= 80, BPCategory.STAGE_1),
    (lambda sys, dia: sys >= 120 and dia < 80, BPCategory.ELEVATED),
)

CATEGORY_COLORS: dict[BPCategory, str] = {
    BPCategory.CRISIS: "#be123c",
    BPCategory.STAGE_2: "#e11d48",
    BPCategory.STAGE_1: "#f97316",
    BPCategory.ELEVATED: "#eab308",
    BPCategory.NORMAL: "#22c55e",
}


def classify(systolic: int, diastolic: int) -> BPCategory:
    """Return the category of a reading."""
    for matches, category in _RULES:
        if matches(systolic, diastolic):
            return category
    return BPCategory.NORMAL


def classify_observation(obs: Observation) -> BPCategory:
    return classify(obs.systolic, obs.diastolic)


def category_distribution(records: Iterable[Observation]) -> dict[BPCategory, int]:
    """Count readings per category; every category is present, most severe first."""
    counts = {category: 0 for category in BPCategory}
    for obs in records:
        counts[classify_observation(obs)] += 1
    return counts


def status_level(systolic: int, diastolic: int) -> str:
    """Coarse three-level status used on the latest-reading card.

    Uses strict thresholds, so it is looser than :func:`classify`: 140/90
    is 'elevated' here but Stage 2 as a category.
    """
    if systolic > 140 or diastolic > 90:
        return "high"
    if systolic > 120 or diastolic > 80:
        return "elevated"
    return "normal"
