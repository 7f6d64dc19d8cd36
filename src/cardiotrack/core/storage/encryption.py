"""Fernet encryption for persisted blobs.

When an encryption key is configured, every blob (the record list and the
settings document) is stored as a Fernet token instead of plain JSON text.
"""

from __future__ import annotations

import logging

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


class BlobEncryptor:
    """Encrypts and decrypts text blobs using Fernet symmetric encryption.

    Usage::

        encryptor = BlobEncryptor(key="...")
        token = encryptor.encrypt('[{"id": "a"}]')
        encryptor.decrypt(token)  # '[{"id": "a"}]'
    """

    def __init__(self, key: str) -> None:
        """Initialize with a Fernet key.

        Args:
            key: A valid Fernet key string. Generate with
                 :meth:`BlobEncryptor.generate_key`.

        Raises:
            EncryptionError: If the key is empty or invalid.
        """
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.encode("utf-8"))
        except ValueError as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, text: str) -> str:
        """Encrypt ``text`` to a URL-safe Fernet token string."""
        return self._fernet.encrypt(text.encode("utf-8")).decode("utf-8")

    def decrypt(self, token: str) -> str:
        """Decrypt a Fernet token back to the original text.

        Raises:
            EncryptionError: If the token is malformed or was made with another key.
        """
        try:
            return self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")
        except (InvalidToken, UnicodeDecodeError) as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc

    @staticmethod
    def generate_key() -> str:
        """Generate a new Fernet key as a string."""
        return Fernet.generate_key().decode("utf-8")
