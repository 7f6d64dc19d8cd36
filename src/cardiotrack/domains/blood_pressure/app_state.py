"""Application-state container for the tracker.

Owns the canonical record list and settings as loaded from the stores,
plus the transient sync and insight states. Every change goes through a
store operation first; the container then replaces its copy with the list
the store returned and notifies subscribers, which only read and render.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any

from cardiotrack.core.audit.logger import AuditLogger
from cardiotrack.core.storage.models import AppSettings, Observation
from cardiotrack.core.storage.record_store import RecordStore
from cardiotrack.core.storage.settings_store import SettingsStore
from cardiotrack.domains.blood_pressure.domain_logic.analytics import (
    latest_reading,
    running_averages,
)
from cardiotrack.domains.blood_pressure.domain_logic.classification import (
    classify_observation,
    status_level,
)
from cardiotrack.domains.blood_pressure.domain_logic.formatting import (
    format_clock,
    format_date,
)
from cardiotrack.domains.blood_pressure.domain_logic.validation import build_observation
from cardiotrack.domains.blood_pressure.domain_logic.windowing import (
    ChartPoint,
    TimeRange,
    chart_series,
)
from cardiotrack.domains.blood_pressure.export.encoder import (
    decode_json,
    encode_csv,
    export_filename,
)
from cardiotrack.domains.blood_pressure.insights.narrative import (
    InsightOutcome,
    NarrativeInsightClient,
)
from cardiotrack.domains.blood_pressure.sync.dispatcher import SyncDispatcher, SyncResult

logger = logging.getLogger(__name__)

MIN_RECORDS_FOR_INSIGHT = 2
RECENT_HISTORY_SIZE = 5

Listener = Callable[["TrackerState"], None]


class SyncStatus(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


class InsightStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class SyncNotConfiguredError(Exception):
    """Raised when a sync is requested before a sync endpoint is saved."""


class TrackerState:
    """Top-level controller state.

    Sync and insight requests are tagged with increasing sequence numbers.
    When requests overlap, only the response to the most recently issued
    request updates the state; earlier responses are discarded.

    Usage::

        state = TrackerState(record_store, settings_store, SyncDispatcher())
        state.subscribe(render)
        state.add_reading("120", "80", "72", "2026-10-19", "08:30")
        await state.sync()
    """

    def __init__(
        self,
        record_store: RecordStore,
        settings_store: SettingsStore,
        dispatcher: SyncDispatcher,
        insight_client: NarrativeInsightClient | None = None,
        audit: AuditLogger | None = None,
        *,
        status_reset_seconds: float = 3.0,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
        tz: tzinfo | None = None,
    ) -> None:
        self._record_store = record_store
        self._settings_store = settings_store
        self._dispatcher = dispatcher
        self._insight_client = insight_client
        self._audit = audit
        self._status_reset_seconds = status_reset_seconds
        self._clock = clock
        self._monotonic = monotonic
        self._tz = tz

        self._records: list[Observation] = record_store.list()
        self._settings: AppSettings = settings_store.get()
        self._listeners: list[Listener] = []

        self._sync_status = SyncStatus.IDLE
        self._sync_status_at = 0.0
        self._sync_seq = 0

        self._insight_status = InsightStatus.IDLE
        self._insight_text: str | None = None
        self._insight_seq = 0

        logger.info("Tracker state loaded: %d records", len(self._records))

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def records(self) -> tuple[Observation, ...]:
        return tuple(self._records)

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def sync_status(self) -> SyncStatus:
        """Current sync status; success and error fall back to idle after the reset delay."""
        if self._sync_status in (SyncStatus.SUCCESS, SyncStatus.ERROR):
            if self._monotonic() - self._sync_status_at >= self._status_reset_seconds:
                return SyncStatus.IDLE
        return self._sync_status

    @property
    def insight_status(self) -> InsightStatus:
        return self._insight_status

    @property
    def insight_text(self) -> str | None:
        return self._insight_text

    @property
    def insights_available(self) -> bool:
        return self._insight_client is not None and len(self._records) >= MIN_RECORDS_FOR_INSIGHT

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("State listener %r failed", listener)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def add_reading(
        self,
        systolic: object,
        diastolic: object,
        pulse: object,
        date_str: str,
        time_str: str,
        note: str | None = None,
    ) -> Observation:
        """Validate raw input, store the new reading, and return it.

        Raises:
            ReadingInputError: If any field is rejected; nothing is stored.
        """
        obs = build_observation(systolic, diastolic, pulse, date_str, time_str, note, tz=self._tz)
        self._records = self._record_store.add(obs)
        if self._audit:
            self._audit.log_mutation("record_add", record_id=obs.id, record_count=len(self._records))
        self._notify()
        return obs

    def delete_reading(self, record_id: str) -> list[Observation]:
        self._records = self._record_store.delete(record_id)
        if self._audit:
            self._audit.log_mutation("record_delete", record_id=record_id, record_count=len(self._records))
        self._notify()
        return list(self._records)

    def import_json(self, text: str) -> list[Observation]:
        """Replace all records with a JSON export.

        Raises:
            ExportDecodeError: If the export is invalid; existing records are kept.
        """
        records = decode_json(text)
        self._records = self._record_store.replace_all(records)
        if self._audit:
            self._audit.log_mutation("records_import", record_count=len(self._records))
        self._notify()
        return list(self._records)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def save_settings(self, partial: AppSettings) -> AppSettings:
        self._settings = self._settings_store.save(partial)
        self._notify()
        return self._settings

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def _set_sync_status(self, status: SyncStatus) -> None:
        self._sync_status = status
        self._sync_status_at = self._monotonic()
        self._notify()

    async def sync(self) -> SyncResult | None:
        """Push all records to the configured endpoint.

        Returns:
            The push result, or None if a newer sync was started while this
            one was in flight (its result is discarded).

        Raises:
            SyncNotConfiguredError: If no sync endpoint is saved.
            Exception: Whatever the dispatcher raises beyond a transport
                failure; the sync status is set to error first.
        """
        url = self._settings.google_sheet_url
        if not url:
            raise SyncNotConfiguredError("No sync endpoint configured")

        self._sync_seq += 1
        seq = self._sync_seq
        snapshot = list(self._records)
        self._set_sync_status(SyncStatus.SYNCING)

        start = self._monotonic()
        try:
            result = await self._dispatcher.push(url, snapshot)
        except Exception as exc:
            if self._audit:
                self._audit.log_disclosure(
                    "sync_push",
                    destination=url,
                    record_count=len(snapshot),
                    duration_ms=(self._monotonic() - start) * 1000,
                    status="failure",
                    error_type=type(exc).__name__,
                )
            if seq == self._sync_seq:
                self._set_sync_status(SyncStatus.ERROR)
            raise
        duration_ms = (self._monotonic() - start) * 1000

        if self._audit:
            self._audit.log_disclosure(
                "sync_push",
                destination=url,
                record_count=len(snapshot),
                duration_ms=duration_ms,
                status="success" if result is SyncResult.DELIVERED else "failure",
            )

        if seq != self._sync_seq:
            logger.info("Discarding stale sync result %s (request %d, latest %d)", result.value, seq, self._sync_seq)
            return None

        if result is SyncResult.DELIVERED:
            self._settings = self._settings_store.save(
                AppSettings(last_sync_time=int(self._clock() * 1000))
            )
            self._set_sync_status(SyncStatus.SUCCESS)
        else:
            self._set_sync_status(SyncStatus.ERROR)
        return result

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------

    async def request_insight(self) -> InsightOutcome | None:
        """Ask for a narrative summary of recent readings.

        Returns:
            The outcome, or None if insights are unavailable or a newer
            request superseded this one.
        """
        if not self.insights_available:
            logger.info("Insight requested with %d records; need %d", len(self._records), MIN_RECORDS_FOR_INSIGHT)
            return None

        self._insight_seq += 1
        seq = self._insight_seq
        self._insight_status = InsightStatus.LOADING
        self._notify()

        start = self._monotonic()
        try:
            outcome = await self._insight_client.analyze(list(self._records))
        except Exception:
            if seq == self._insight_seq:
                self._insight_status = InsightStatus.ERROR
                self._notify()
            raise

        if self._audit:
            self._audit.log_disclosure(
                "insight_request",
                destination=self._insight_client.provider_name,
                record_count=outcome.record_count,
                duration_ms=(self._monotonic() - start) * 1000,
                status="failure" if outcome.failed else "success",
            )

        if seq != self._insight_seq:
            logger.info("Discarding stale insight response (request %d, latest %d)", seq, self._insight_seq)
            return None

        self._insight_text = outcome.text
        self._insight_status = InsightStatus.ERROR if outcome.failed else InsightStatus.READY
        self._notify()
        return outcome

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def _reading_view(self, obs: Observation) -> dict[str, Any]:
        return {
            **obs.to_dict(),
            "date": format_date(obs.timestamp, self._tz),
            "time": format_clock(obs.timestamp, self._tz),
            "category": classify_observation(obs).value,
        }

    def dashboard(self) -> dict[str, Any]:
        """Latest-reading card, averages, and the most recent history."""
        latest = latest_reading(self._records)
        averages = running_averages(self._records)
        last_sync = self._settings.last_sync_time
        return {
            "record_count": len(self._records),
            "latest": self._reading_view(latest) if latest else None,
            "latest_status": status_level(latest.systolic, latest.diastolic) if latest else None,
            "averages": averages.to_dict() if averages else None,
            "recent": [self._reading_view(r) for r in self._records[:RECENT_HISTORY_SIZE]],
            "last_sync": format_clock(last_sync, self._tz) if last_sync else None,
            "sync_status": self.sync_status.value,
            "insights_available": self.insights_available,
        }

    def chart(self, time_range: TimeRange | str, now: datetime | None = None) -> list[ChartPoint]:
        return chart_series(self._records, time_range, now=now, tz=self._tz)

    def export_csv(self) -> tuple[str, str]:
        """Return ``(filename, csv_text)`` for the current records."""
        return export_filename(), encode_csv(self._records, self._tz)
