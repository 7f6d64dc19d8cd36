"""Command-line entry point for the CardioTrack MCP server.

Run with ``cardiotrack-server`` (or ``python -m cardiotrack.core.server.main``).
Configuration comes from the environment and ``.env``; an invalid
configuration, including a non-loopback bind without the explicit override,
stops startup before the database is opened.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from cardiotrack.core.config.settings import Settings, get_settings
from cardiotrack.core.server.app import create_app

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _log_startup(settings: Settings) -> None:
    logger.info("Readings store: %s", settings.resolved_db_path)
    logger.info("Encryption at rest: %s", "on" if settings.encryption_key else "off")
    if settings.sync_timeout_seconds is None:
        logger.info("Sync push timeout: none")
    else:
        logger.info("Sync push timeout: %.0fs", settings.sync_timeout_seconds)
    logger.info("Insight provider: %s", settings.llm_provider)
    if settings.cardiotrack_allow_insecure_bind:
        logger.warning(
            "Insecure bind allowed; %s is reachable without authentication",
            settings.cardiotrack_host,
        )


def run() -> None:
    """Load settings, log the effective configuration, and serve Streamable HTTP."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        raise SystemExit(f"Invalid CardioTrack configuration:\n{exc}") from exc

    logging.basicConfig(
        level=getattr(logging, settings.cardiotrack_log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    _log_startup(settings)

    server = create_app()
    logger.info(
        "Serving CardioTrack on http://%s:%d/mcp",
        settings.cardiotrack_host,
        settings.cardiotrack_port,
    )
    server.run(
        transport="streamable-http",
        host=settings.cardiotrack_host,
        port=settings.cardiotrack_port,
    )


if __name__ == "__main__":
    run()
