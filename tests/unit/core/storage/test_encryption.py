"""Tests for the BlobEncryptor (Fernet-based blob encryption)."""

from __future__ import annotations

import pytest

from cardiotrack.core.storage.encryption import BlobEncryptor, EncryptionError


@pytest.fixture
def encryptor(encryption_key: str) -> BlobEncryptor:
    return BlobEncryptor(encryption_key)


class TestRoundTrip:
    def test_text_round_trip(self, encryptor: BlobEncryptor):
        text = '[{"id":"a","systolic":120}]'
        token = encryptor.encrypt(text)
        assert token != text
        assert encryptor.decrypt(token) == text

    def test_unicode_round_trip(self, encryptor: BlobEncryptor):
        text = "note: après café ☕"
        assert encryptor.decrypt(encryptor.encrypt(text)) == text

    def test_tokens_differ_per_call(self, encryptor: BlobEncryptor):
        assert encryptor.encrypt("same") != encryptor.encrypt("same")


class TestKeyValidation:
    def test_empty_key_raises(self):
        with pytest.raises(EncryptionError, match="must not be empty"):
            BlobEncryptor("")

    def test_whitespace_key_raises(self):
        with pytest.raises(EncryptionError, match="must not be empty"):
            BlobEncryptor("   ")

    def test_invalid_key_raises(self):
        with pytest.raises(EncryptionError, match="Invalid encryption key"):
            BlobEncryptor("not-a-fernet-key")

    def test_generated_key_is_usable(self):
        encryptor = BlobEncryptor(BlobEncryptor.generate_key())
        assert encryptor.decrypt(encryptor.encrypt("x")) == "x"


class TestDecryptFailures:
    def test_wrong_key_raises(self, encryptor: BlobEncryptor):
        other = BlobEncryptor(BlobEncryptor.generate_key())
        with pytest.raises(EncryptionError, match="invalid token or wrong key"):
            other.decrypt(encryptor.encrypt("secret"))

    def test_garbage_token_raises(self, encryptor: BlobEncryptor):
        with pytest.raises(EncryptionError):
            encryptor.decrypt("definitely-not-a-token")
