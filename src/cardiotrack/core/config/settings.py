"""Application settings loaded from environment variables."""

from __future__ import annotations

from ipaddress import ip_address
from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings


def is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


class Settings(BaseSettings):
    """CardioTrack server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default: readings are personal health data and there is no auth layer.
    cardiotrack_host: str = "127.0.0.1"
    cardiotrack_port: int = 8011
    cardiotrack_log_level: str = "info"
    cardiotrack_allow_insecure_bind: bool = False

    # Narrative insight LLM
    llm_provider: Literal["anthropic", "openai", "mock"] = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    # Seconds before an insight request is abandoned
    insight_timeout_seconds: float = 30.0

    # Storage
    db_path: str = "~/.cardiotrack/cardiotrack.db"

    # Optional Fernet key; when empty, blobs are stored as plain JSON
    encryption_key: str = ""

    # Sync push. None means no client-side timeout.
    sync_timeout_seconds: float | None = None

    # Seconds before a success/error sync status returns to idle
    status_reset_seconds: float = 3.0

    @model_validator(mode="after")
    def _require_loopback_bind(self) -> Settings:
        if not self.cardiotrack_allow_insecure_bind and not is_loopback_host(self.cardiotrack_host):
            raise ValueError(
                f"Refusing to bind CardioTrack to non-loopback host {self.cardiotrack_host!r} "
                "without an auth layer. Set CARDIOTRACK_ALLOW_INSECURE_BIND=true to override (unsafe)."
            )
        return self

    @property
    def resolved_db_path(self) -> str:
        """``db_path`` with ``~`` expanded; ``:memory:`` is returned unchanged."""
        if self.db_path == ":memory:":
            return self.db_path
        return str(Path(self.db_path).expanduser())


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
