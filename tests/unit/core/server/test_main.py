"""Tests for the server entry point."""

from __future__ import annotations

import logging

import pytest

from cardiotrack.core.server import main


class _FakeServer:
    def __init__(self) -> None:
        self.run_kwargs: dict | None = None

    def run(self, **kwargs) -> None:
        self.run_kwargs = kwargs


def test_invalid_bind_stops_before_app_is_built(monkeypatch):
    monkeypatch.setenv("CARDIOTRACK_HOST", "0.0.0.0")

    def fail():
        raise AssertionError("create_app must not be called")

    monkeypatch.setattr(main, "create_app", fail)
    with pytest.raises(SystemExit, match="Invalid CardioTrack configuration"):
        main.run()


def test_serves_streamable_http(monkeypatch):
    server = _FakeServer()
    monkeypatch.setattr(main, "create_app", lambda: server)
    monkeypatch.setenv("CARDIOTRACK_PORT", "9100")
    main.run()
    assert server.run_kwargs == {"transport": "streamable-http", "host": "127.0.0.1", "port": 9100}


def test_logs_effective_configuration(monkeypatch, caplog, encryption_key):
    monkeypatch.setenv("ENCRYPTION_KEY", encryption_key)
    monkeypatch.setattr(main, "create_app", _FakeServer)
    with caplog.at_level(logging.INFO, logger="cardiotrack.core.server.main"):
        main.run()
    assert "Readings store: :memory:" in caplog.text
    assert "Encryption at rest: on" in caplog.text
    assert "Insight provider: mock" in caplog.text
    assert encryption_key not in caplog.text
