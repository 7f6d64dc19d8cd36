"""Record store: the canonical, newest-first list of observations.

Persistence is whole-collection read/modify/write: each mutation loads the
full list, changes it, and writes the full list back as one blob.
"""

from __future__ import annotations

import logging

from cardiotrack.core.storage.blobs import RECORDS_KEY, BlobStore, CorruptBlobError
from cardiotrack.core.storage.models import Observation

logger = logging.getLogger(__name__)


class RecordStore:
    """Owns the canonical observation list.

    Ordering is insertion order with the most recently added record first;
    timestamps chosen by the user never reorder the list.

    Usage::

        store = RecordStore(BlobStore(db))
        records = store.add(Observation(id=str(uuid.uuid4()), ...))
        records = store.delete(records[0].id)
    """

    def __init__(self, blobs: BlobStore) -> None:
        self._blobs = blobs

    def list(self) -> list[Observation]:
        """Return the canonical list. Absent or corrupt data yields ``[]``."""
        return self._load(for_update=False)

    def _load(self, for_update: bool) -> list[Observation]:
        """Read the stored list.

        With ``for_update`` the caller is about to overwrite the blob, so a
        document that cannot be read is first copied aside instead of being
        lost to the write.
        """
        try:
            document = self._blobs.load(RECORDS_KEY)
        except CorruptBlobError as exc:
            logger.warning("Failed to load records, starting empty: %s", exc)
            if for_update:
                self._blobs.preserve_unreadable(RECORDS_KEY)
            return []

        if document is None:
            return []
        if not isinstance(document, list):
            logger.warning(
                "Stored records are a %s, not a list; starting empty",
                type(document).__name__,
            )
            if for_update:
                self._blobs.preserve_unreadable(RECORDS_KEY)
            return []

        records: list[Observation] = []
        for index, item in enumerate(document):
            try:
                records.append(Observation.from_dict(item))
            except ValueError as exc:
                logger.warning("Dropping malformed stored record at index %d: %s", index, exc)
        return records

    def add(self, obs: Observation) -> list[Observation]:
        """Prepend ``obs`` and persist. The caller guarantees a fresh ``obs.id``."""
        updated = [obs, *self._load(for_update=True)]
        self._persist(updated)
        logger.info("Record added: %s (%d total)", obs.id, len(updated))
        return updated

    def delete(self, record_id: str) -> list[Observation]:
        """Remove the record with ``record_id`` if present, persist, return the list."""
        current = self._load(for_update=True)
        updated = [r for r in current if r.id != record_id]
        self._persist(updated)
        if len(updated) != len(current):
            logger.info("Record deleted: %s (%d remaining)", record_id, len(updated))
        else:
            logger.debug("Delete of unknown record %s ignored", record_id)
        return updated

    def replace_all(self, records: list[Observation]) -> list[Observation]:
        """Overwrite the canonical list, e.g. when restoring a JSON export."""
        self._load(for_update=True)  # sets aside a list that cannot be read
        updated = list(records)
        self._persist(updated)
        logger.info("Record list replaced (%d records)", len(updated))
        return updated

    def count(self) -> int:
        return len(self.list())

    def _persist(self, records: list[Observation]) -> None:
        self._blobs.save(RECORDS_KEY, [r.to_dict() for r in records])
