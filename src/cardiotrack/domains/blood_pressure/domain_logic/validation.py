"""Boundary validation for user-entered readings.

Raw form values arrive as text. Only fully parsed, positive integer
readings with a valid date and time are turned into an Observation; the
record store itself assumes well-typed input.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, tzinfo

from cardiotrack.core.storage.models import Observation
from cardiotrack.domains.blood_pressure.domain_logic.formatting import to_epoch_ms

_INT_RE = re.compile(r"^\s*\d+\s*$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")


class ReadingInputError(ValueError):
    """Raised when raw reading input is rejected. ``errors`` lists every problem."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


def _parse_positive_int(label: str, raw: object, errors: list[str]) -> int | None:
    if isinstance(raw, bool):
        errors.append(f"{label} must be a whole number")
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _INT_RE.match(raw):
        value = int(raw)
    else:
        errors.append(f"{label} must be a whole number")
        return None
    if value <= 0:
        errors.append(f"{label} must be greater than 0")
        return None
    return value


def parse_timestamp(
    date_str: str,
    time_str: str,
    tz: tzinfo | None = None,
    errors: list[str] | None = None,
) -> int | None:
    """Combine ``YYYY-MM-DD`` and ``HH:MM`` in ``tz`` (local if None) into epoch ms."""
    errors = errors if errors is not None else []
    if not _DATE_RE.match(date_str or ""):
        errors.append("Date must be in YYYY-MM-DD format")
        return None
    if not _TIME_RE.match(time_str or ""):
        errors.append("Time must be in HH:MM format")
        return None
    try:
        naive = datetime.strptime(f"{date_str}T{time_str}", "%Y-%m-%dT%H:%M")
    except ValueError:
        errors.append("Date and time do not form a valid moment")
        return None
    moment = naive.replace(tzinfo=tz) if tz is not None else naive.astimezone()
    return to_epoch_ms(moment)


def build_observation(
    systolic: object,
    diastolic: object,
    pulse: object,
    date_str: str,
    time_str: str,
    note: str | None = None,
    *,
    tz: tzinfo | None = None,
) -> Observation:
    """Validate raw input and create a new Observation with a fresh UUID4 id.

    Raises:
        ReadingInputError: With all problems found, if any field is invalid.
    """
    errors: list[str] = []
    sys_value = _parse_positive_int("Systolic", systolic, errors)
    dia_value = _parse_positive_int("Diastolic", diastolic, errors)
    pulse_value = _parse_positive_int("Pulse", pulse, errors)
    timestamp = parse_timestamp(date_str, time_str, tz, errors)
    if errors:
        raise ReadingInputError(errors)

    cleaned_note = note.strip() if note else ""
    return Observation(
        id=str(uuid.uuid4()),
        systolic=sys_value,
        diastolic=dia_value,
        pulse=pulse_value,
        timestamp=timestamp,
        note=cleaned_note or None,
    )
