"""Settings store: the small sync configuration document."""

from __future__ import annotations

import logging

from cardiotrack.core.storage.blobs import SETTINGS_KEY, BlobStore, CorruptBlobError
from cardiotrack.core.storage.models import AppSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Persists :class:`AppSettings` independently of the record list."""

    def __init__(self, blobs: BlobStore) -> None:
        self._blobs = blobs

    def get(self) -> AppSettings:
        """Return persisted settings; absent or corrupt data yields empty settings."""
        return self._load(for_update=False)

    def _load(self, for_update: bool) -> AppSettings:
        try:
            document = self._blobs.load(SETTINGS_KEY)
        except CorruptBlobError as exc:
            logger.warning("Failed to load settings, using defaults: %s", exc)
            if for_update:
                self._blobs.preserve_unreadable(SETTINGS_KEY)
            return AppSettings()
        if document is None:
            return AppSettings()
        return AppSettings.from_dict(document)

    def save(self, partial: AppSettings) -> AppSettings:
        """Merge ``partial`` over the persisted settings and persist the result.

        Unreadable stored settings are copied aside before being replaced.
        """
        updated = self._load(for_update=True).merged_with(partial)
        self._blobs.save(SETTINGS_KEY, updated.to_dict())
        logger.info("Settings saved: %s", sorted(updated.to_dict()))
        return updated
