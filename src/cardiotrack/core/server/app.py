"""CardioTrack MCP Server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from cardiotrack.core.audit.logger import AuditLogger
from cardiotrack.core.config.settings import Settings, get_settings
from cardiotrack.core.llm.client import LLMClient
from cardiotrack.core.llm.provider import LLMProvider, create_provider
from cardiotrack.core.storage.blobs import BlobStore
from cardiotrack.core.storage.database import TrackerDatabase
from cardiotrack.core.storage.encryption import BlobEncryptor, EncryptionError
from cardiotrack.core.storage.record_store import RecordStore
from cardiotrack.core.storage.settings_store import SettingsStore
from cardiotrack.domains.blood_pressure.app_state import TrackerState
from cardiotrack.domains.blood_pressure.insights.narrative import NarrativeInsightClient
from cardiotrack.domains.blood_pressure.sync.dispatcher import SyncDispatcher
from cardiotrack.domains.blood_pressure.tools.analytics_tools import register_analytics_tools
from cardiotrack.domains.blood_pressure.tools.audit_tools import register_audit_tools
from cardiotrack.domains.blood_pressure.tools.insight_tools import register_insight_tools
from cardiotrack.domains.blood_pressure.tools.reading_tools import register_reading_tools
from cardiotrack.domains.blood_pressure.tools.sync_tools import register_sync_tools

logger = logging.getLogger(__name__)


def _resolve_provider(settings: Settings) -> tuple[str, str, str]:
    """Pick (provider_name, api_key, model); fall back to mock without a key."""
    if settings.llm_provider == "mock":
        return "mock", "", ""
    if settings.llm_provider == "anthropic":
        api_key, model = settings.anthropic_api_key, settings.anthropic_model
    elif settings.llm_provider == "openai":
        api_key, model = settings.openai_api_key, settings.openai_model
    else:  # pragma: no cover
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider!r}")

    if not api_key:
        logger.warning(
            "No API key configured for provider '%s'; falling back to mock provider",
            settings.llm_provider,
        )
        return "mock", "", ""
    return settings.llm_provider, api_key, model


def _open_blob_store(database: TrackerDatabase, settings: Settings) -> BlobStore:
    encryptor = None
    if settings.encryption_key:
        try:
            encryptor = BlobEncryptor(settings.encryption_key)
        except EncryptionError as exc:
            logger.error("Failed to initialize encryption: %s", exc)
            raise
        logger.info("Blob encryption enabled")
    else:
        logger.info(
            "No ENCRYPTION_KEY configured; readings are stored as plain JSON. "
            "Set ENCRYPTION_KEY to encrypt them at rest."
        )
    return BlobStore(database, encryptor)


def create_app(
    *,
    database_override: TrackerDatabase | None = None,
    provider_override: LLMProvider | None = None,
    dispatcher_override: SyncDispatcher | None = None,
) -> FastMCP:
    """Create and configure the CardioTrack MCP server.

    This is the main application factory. It:
    1. Opens the local database and blob store
    2. Builds the record and settings stores and the audit logger
    3. Creates the narrative insight client and the sync dispatcher
    4. Loads the application state once
    5. Registers all tools
    """
    settings = get_settings()

    server = FastMCP(
        "CardioTrack",
        instructions=(
            "Personal blood pressure and pulse tracker. Record readings, review "
            "averages, clinical categories and trends, export CSV/JSON, sync to a "
            "spreadsheet, and request a short advisory trend summary."
        ),
    )

    # --- Storage ---
    if database_override is not None:
        database = database_override
    else:
        database = TrackerDatabase(settings.resolved_db_path)
    database.initialize()
    logger.info(
        "Tracker database ready: %s (schema v%d)",
        settings.resolved_db_path if database_override is None else "<override>",
        database.get_schema_version(),
    )

    blobs = _open_blob_store(database, settings)
    record_store = RecordStore(blobs)
    settings_store = SettingsStore(blobs)
    audit = AuditLogger(database)

    # --- Collaborators ---
    if provider_override is not None:
        provider_name, provider = "override", provider_override
    else:
        provider_name, api_key, model = _resolve_provider(settings)
        provider = create_provider(
            provider_name=provider_name,
            api_key=api_key,
            model=model,
            timeout=settings.insight_timeout_seconds,
        )
    insight_client = NarrativeInsightClient(LLMClient(provider, provider_name))

    dispatcher = dispatcher_override or SyncDispatcher(timeout=settings.sync_timeout_seconds)

    state = TrackerState(
        record_store,
        settings_store,
        dispatcher,
        insight_client,
        audit,
        status_reset_seconds=settings.status_reset_seconds,
    )

    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "CardioTrack",
            "version": "0.1.0",
            "records_stored": len(state.records),
            "encrypted_at_rest": blobs.encrypted,
            "sync_configured": bool(state.settings.google_sheet_url),
            "llm_provider": provider_name,
        }

    register_reading_tools(server, state)
    register_analytics_tools(server, state)
    register_sync_tools(server, state)
    register_insight_tools(server, state)
    register_audit_tools(server, audit)
    logger.info("CardioTrack tools registered")

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when accessed (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
