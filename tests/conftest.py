"""Shared test fixtures for CardioTrack tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("DB_PATH", ":memory:")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tracker_db():
    """Create an in-memory TrackerDatabase for testing."""
    from cardiotrack.core.storage.database import TrackerDatabase

    db = TrackerDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def encryption_key() -> str:
    from cryptography.fernet import Fernet

    return Fernet.generate_key().decode()


@pytest.fixture
def blob_store(tracker_db):
    """Plain-JSON blob store over the in-memory database."""
    from cardiotrack.core.storage.blobs import BlobStore

    return BlobStore(tracker_db)


@pytest.fixture
def encrypted_blob_store(tracker_db, encryption_key):
    from cardiotrack.core.storage.blobs import BlobStore
    from cardiotrack.core.storage.encryption import BlobEncryptor

    return BlobStore(tracker_db, BlobEncryptor(encryption_key))


@pytest.fixture
def record_store(blob_store):
    from cardiotrack.core.storage.record_store import RecordStore

    return RecordStore(blob_store)


@pytest.fixture
def settings_store(blob_store):
    from cardiotrack.core.storage.settings_store import SettingsStore

    return SettingsStore(blob_store)


@pytest.fixture
def audit_logger(tracker_db):
    """Create an AuditLogger backed by in-memory SQLite."""
    from cardiotrack.core.audit.logger import AuditLogger

    return AuditLogger(tracker_db)


@pytest.fixture
def mock_provider():
    from cardiotrack.core.llm.providers.mock import MockProvider

    return MockProvider()
