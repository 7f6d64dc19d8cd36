"""Integration tests for the CardioTrack MCP server."""

from __future__ import annotations

import asyncio
import json
import logging

import httpx
import pytest
from fastmcp import Client

from cardiotrack.core.llm.providers.mock import MockProvider
from cardiotrack.core.server.app import create_app
from cardiotrack.core.storage.database import TrackerDatabase
from cardiotrack.domains.blood_pressure.sync.dispatcher import SyncDispatcher


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _payload(result) -> dict:
    """Decode the JSON text a tool returned."""
    blocks = getattr(result, "content", result)
    return json.loads(blocks[0].text)


def _text(result) -> str:
    return getattr(result, "content", result)[0].text


ALL_EXPECTED_TOOLS = [
    "health_check",
    "add_reading",
    "delete_reading",
    "list_readings",
    "export_csv",
    "export_json",
    "import_json",
    "dashboard",
    "classify_reading",
    "chart_series",
    "daily_average_series",
    "get_sync_settings",
    "save_sync_settings",
    "sync_now",
    "sync_script",
    "analyze_trends",
    "audit_trail",
]

SHEET_URL = "https://script.example.com/macros/s/abc/exec"


@pytest.fixture
def pushed() -> list[httpx.Request]:
    return []


@pytest.fixture
def client(pushed):
    """MCP client over a fresh in-memory server with a mock sync endpoint."""
    def handler(request: httpx.Request) -> httpx.Response:
        pushed.append(request)
        return httpx.Response(200, json={"status": "success"})

    mcp = create_app(
        database_override=TrackerDatabase(":memory:"),
        provider_override=MockProvider(response_content="Readings are steady. Keep a routine."),
        dispatcher_override=SyncDispatcher(transport=httpx.MockTransport(handler)),
    )
    return Client(mcp)


def _add(client: Client, systolic: str = "120", note: str = ""):
    return client.call_tool("add_reading", {
        "systolic": systolic,
        "diastolic": "80",
        "pulse": "72",
        "date": "2026-10-19",
        "time": "08:30",
        "note": note,
    })


def test_server_starts_and_lists_tools(client):
    """Server should start and expose all registered tools."""
    async def _check():
        async with client:
            tools = await client.list_tools()
            tool_names = [t.name for t in tools]
            for expected in ALL_EXPECTED_TOOLS:
                assert expected in tool_names, f"Missing tool: {expected}"
    _run(_check())


def test_health_check_returns_ok(client):
    """health_check tool should return status ok."""
    async def _check():
        async with client:
            result = await client.call_tool("health_check", {})
            assert "ok" in str(result)
            assert "records_stored" in str(result)
    _run(_check())


def test_add_list_delete(client):
    async def _check():
        async with client:
            saved = _payload(await _add(client, "125", note="after coffee"))
            assert saved["status"] == "saved"
            record_id = saved["record"]["id"]

            listed = _payload(await client.call_tool("list_readings", {}))
            assert listed["total"] == 1
            assert listed["records"][0]["note"] == "after coffee"

            deleted = _payload(await client.call_tool("delete_reading", {"record_id": record_id}))
            assert deleted == {"status": "ok", "deleted": True, "record_count": 0}
    _run(_check())


def test_add_reading_reports_validation_errors(client, caplog):
    async def _check():
        async with client:
            result = _payload(await client.call_tool("add_reading", {
                "systolic": "abc", "diastolic": "80", "pulse": "0",
            }))
            assert result["status"] == "error"
            assert "Systolic must be a whole number" in result["errors"]
            assert "Pulse must be greater than 0" in result["errors"]
    with caplog.at_level(logging.INFO, logger="cardiotrack"):
        _run(_check())
    assert "add_reading rejected: 2 invalid field(s)" in caplog.text


def test_rejected_import_is_logged(client, caplog):
    async def _check():
        async with client:
            result = _payload(await client.call_tool("import_json", {"data": "[1]"}))
            assert result["status"] == "error"
    with caplog.at_level(logging.INFO, logger="cardiotrack"):
        _run(_check())
    assert "import_json rejected, records unchanged" in caplog.text


def test_dashboard_and_classification(client):
    async def _check():
        async with client:
            await _add(client, "119")
            await _add(client, "120")
            view = _payload(await client.call_tool("dashboard", {}))
            assert view["record_count"] == 2
            assert view["averages"]["systolic"] == 120
            assert view["insights_available"] is True

            category = _payload(await client.call_tool("classify_reading", {"systolic": 125, "diastolic": 95}))
            assert category["category"] == "Stage 2"
    _run(_check())


def test_chart_series_rejects_unknown_range(client):
    async def _check():
        async with client:
            result = _payload(await client.call_tool("chart_series", {"time_range": "decade"}))
            assert result["status"] == "error"
            series = _payload(await client.call_tool("chart_series", {"time_range": "year"}))
            assert series["status"] == "ok"
            assert set(series["distribution"]) == {"Crisis/Severe", "Stage 2", "Stage 1", "Elevated", "Normal"}
    _run(_check())


def test_export_and_import(client):
    async def _check():
        async with client:
            await _add(client, "130", note="a, b")
            csv_result = _payload(await client.call_tool("export_csv", {}))
            assert csv_result["filename"].startswith("cardiotrack_export_")
            assert csv_result["csv"].endswith('"a, b"')

            backup = _text(await client.call_tool("export_json", {}))
            await _add(client, "140")
            restored = _payload(await client.call_tool("import_json", {"data": backup}))
            assert restored == {"status": "ok", "record_count": 1}

            bad = _payload(await client.call_tool("import_json", {"data": "{"}))
            assert bad["status"] == "error"
    _run(_check())


def test_sync_flow(client, pushed):
    async def _check():
        async with client:
            not_configured = _payload(await client.call_tool("sync_now", {}))
            assert not_configured["status"] == "not_configured"

            await _add(client)
            await client.call_tool("save_sync_settings", {"google_sheet_url": SHEET_URL})
            result = _payload(await client.call_tool("sync_now", {}))
            assert result["status"] == "ok"
            assert result["result"] == "delivered"
            assert result["googleSheetUrl"] == SHEET_URL
            assert "lastSyncTime" in result

            trail = _payload(await client.call_tool("audit_trail", {"action": "sync_push"}))
            assert trail["disclosures"] == 1
            assert trail["events"][0]["destination"] == "script.example.com"
    _run(_check())
    assert len(pushed) == 1
    assert len(json.loads(pushed[0].content)) == 1


def test_sync_script(client):
    async def _check():
        async with client:
            script = _text(await client.call_tool("sync_script", {}))
            assert "function doPost(e)" in script
    _run(_check())


def test_analyze_trends(client):
    async def _check():
        async with client:
            unavailable = _payload(await client.call_tool("analyze_trends", {}))
            assert unavailable["status"] == "unavailable"

            await _add(client, "120")
            await _add(client, "122")
            result = _payload(await client.call_tool("analyze_trends", {}))
            assert result["status"] == "ok"
            assert result["analysis"] == "Readings are steady. Keep a routine."
            assert result["records_analyzed"] == 2
    _run(_check())
