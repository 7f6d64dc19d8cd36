"""CSV and JSON export of the record list.

CSV is a human-oriented spreadsheet view (display dates, one row per
reading). JSON is the full-fidelity backup format: decoding it gives back
exactly the records that were encoded.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import date, datetime, timezone, tzinfo

from cardiotrack.core.storage.models import Observation
from cardiotrack.domains.blood_pressure.domain_logic.formatting import format_date, format_time

logger = logging.getLogger(__name__)

CSV_HEADERS = ("Date", "Time", "Systolic (mmHg)", "Diastolic (mmHg)", "Pulse (bpm)", "Note")


class ExportDecodeError(ValueError):
    """Raised when a JSON export cannot be decoded into records."""


def _quote_note(note: str | None) -> str:
    """Always wrap the note in double quotes; embedded quotes are doubled.

    Commas and newlines stay inside the quotes, so a standard CSV reader
    keeps the note as a single column.
    """
    return '"' + (note or "").replace('"', '""') + '"'


def encode_csv(records: Sequence[Observation], tz: tzinfo | None = None) -> str:
    """Render records as CSV text in the order given.

    Zero records produce exactly the header row. Rows are separated by
    ``\\n`` with no trailing newline.
    """
    lines = [",".join(CSV_HEADERS)]
    for r in records:
        lines.append(",".join([
            format_date(r.timestamp, tz),
            format_time(r.timestamp, tz),
            str(r.systolic),
            str(r.diastolic),
            str(r.pulse),
            _quote_note(r.note),
        ]))
    return "\n".join(lines)


def encode_json(records: Sequence[Observation]) -> str:
    """Pretty-printed JSON array using the persisted field names."""
    return json.dumps([r.to_dict() for r in records], indent=2)


def decode_json(text: str) -> list[Observation]:
    """Parse a JSON export back into records.

    Raises:
        ExportDecodeError: If the text is not JSON, not an array, or holds an
            invalid record. Nothing is partially imported.
    """
    try:
        document = json.loads(text)
    except ValueError as exc:
        raise ExportDecodeError(f"Not valid JSON: {exc}") from exc
    if not isinstance(document, list):
        raise ExportDecodeError("Expected a JSON array of records")

    records = []
    seen: set[str] = set()
    for index, item in enumerate(document):
        try:
            obs = Observation.from_dict(item)
        except ValueError as exc:
            raise ExportDecodeError(f"Record {index} is invalid: {exc}") from exc
        if obs.id in seen:
            raise ExportDecodeError(f"Record {index} repeats id {obs.id!r}")
        seen.add(obs.id)
        records.append(obs)

    logger.debug("Decoded %d records from JSON export", len(records))
    return records


def export_filename(today: date | None = None) -> str:
    """``cardiotrack_export_YYYY-MM-DD.csv`` for the given (default: current UTC) date."""
    today = today or datetime.now(timezone.utc).date()
    return f"cardiotrack_export_{today.isoformat()}.csv"
