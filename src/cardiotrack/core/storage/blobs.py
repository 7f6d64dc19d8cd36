"""Keyed JSON documents on top of the blob table, optionally encrypted at rest."""

from __future__ import annotations

import json
import logging
from typing import Any

from cardiotrack.core.storage.database import TrackerDatabase
from cardiotrack.core.storage.encryption import BlobEncryptor, EncryptionError

logger = logging.getLogger(__name__)

RECORDS_KEY = "cardiotrack_data_v1"
SETTINGS_KEY = "cardiotrack_settings_v1"

# Appended to a key when its unreadable contents are set aside
BACKUP_SUFFIX = ".unreadable"


class CorruptBlobError(Exception):
    """Raised when a stored blob cannot be decrypted or parsed."""


class BlobStore:
    """Reads and writes whole JSON documents under independent keys.

    Every write replaces the full document. Reads distinguish between an
    absent key (``None``) and unusable content (:class:`CorruptBlobError`);
    the stores above decide how to recover.
    """

    def __init__(self, database: TrackerDatabase, encryptor: BlobEncryptor | None = None) -> None:
        self._db = database
        self._enc = encryptor

    @property
    def encrypted(self) -> bool:
        return self._enc is not None

    def load(self, key: str) -> Any:
        raw = self._db.get_blob(key)
        if raw is None:
            return None
        try:
            text = self._enc.decrypt(raw) if self._enc else raw
            return json.loads(text)
        except (EncryptionError, ValueError) as exc:
            raise CorruptBlobError(f"Blob {key!r} is unreadable: {exc}") from exc

    def save(self, key: str, document: Any) -> None:
        text = json.dumps(document, separators=(",", ":"))
        self._db.put_blob(key, self._enc.encrypt(text) if self._enc else text)

    def preserve_unreadable(self, key: str) -> str | None:
        """Copy the raw text under ``key`` to a free backup key before it is overwritten.

        Used when a write would replace a document that could not be read
        (wrong encryption key, corruption). Returns the backup key, or None
        if nothing was stored under ``key``.
        """
        raw = self._db.get_blob(key)
        if raw is None:
            return None
        backup = f"{key}{BACKUP_SUFFIX}"
        n = 1
        while self._db.get_blob(backup) is not None:
            n += 1
            backup = f"{key}{BACKUP_SUFFIX}.{n}"
        self._db.put_blob(backup, raw)
        logger.error("Unreadable blob %r preserved as %r before overwrite", key, backup)
        return backup
