"""Data models for the CardioTrack persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class Observation:
    """One blood pressure / pulse reading.

    Immutable once created; the only lifecycle operation after ``add`` is
    deletion by ``id``. Persisted field names match the attribute names.
    """

    id: str
    systolic: int
    diastolic: int
    pulse: int
    timestamp: int  # epoch milliseconds
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "systolic": self.systolic,
            "diastolic": self.diastolic,
            "pulse": self.pulse,
            "timestamp": self.timestamp,
        }
        if self.note is not None:
            data["note"] = self.note
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Observation:
        """Build an Observation from its persisted form.

        Raises:
            ValueError: If a required field is missing or not an integer.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected an object, got {type(data).__name__}")
        try:
            record_id = data["id"]
            values = {name: data[name] for name in ("systolic", "diastolic", "pulse", "timestamp")}
        except KeyError as exc:
            raise ValueError(f"Missing field: {exc.args[0]}") from exc

        if not isinstance(record_id, str) or not record_id:
            raise ValueError("Field 'id' must be a non-empty string")
        for name, value in values.items():
            # bool is an int subclass; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Field {name!r} must be an integer")

        note = data.get("note")
        if note is not None and not isinstance(note, str):
            raise ValueError("Field 'note' must be a string")

        return cls(id=record_id, note=note, **values)


@dataclass(frozen=True)
class AppSettings:
    """User settings: sync endpoint and last successful sync time.

    ``None`` means "absent". Both fields are optional and merge-updated.
    """

    google_sheet_url: str | None = None
    last_sync_time: int | None = None  # epoch milliseconds

    _WIRE_NAMES = {
        "google_sheet_url": "googleSheetUrl",
        "last_sync_time": "lastSyncTime",
    }

    def to_dict(self) -> dict[str, Any]:
        """Persisted form; absent fields are omitted."""
        return {
            wire: getattr(self, attr)
            for attr, wire in self._WIRE_NAMES.items()
            if getattr(self, attr) is not None
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppSettings:
        """Build settings from the persisted form, ignoring unknown or mistyped keys."""
        if not isinstance(data, dict):
            return cls()
        url = data.get("googleSheetUrl")
        last_sync = data.get("lastSyncTime")
        return cls(
            google_sheet_url=url if isinstance(url, str) else None,
            last_sync_time=(
                last_sync
                if isinstance(last_sync, int) and not isinstance(last_sync, bool)
                else None
            ),
        )

    def merged_with(self, partial: AppSettings) -> AppSettings:
        """Shallow merge: fields set on ``partial`` win, absent ones are kept."""
        updates = {
            attr: getattr(partial, attr)
            for attr in self._WIRE_NAMES
            if getattr(partial, attr) is not None
        }
        return replace(self, **updates)
