"""Integration tests for the Modiva Tracker MCP server."""

from __future__ import annotations

import asyncio
import json

import pytest
from fastmcp import Client

from modiva.core.server.app import create_app
from modiva.core.storage.kv import MemoryKeyValueStorage
from modiva.core.store.store import DEFAULT_PERSIST_KEY, Store


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


ALL_EXPECTED_TOOLS = [
    "health_check",
    "record_vitamin_consumption",
    "record_hemoglobin",
    "dashboard_summary",
    "set_theme",
    "set_language",
    "store_history",
    "submit_report",
    "list_reports",
    "delete_report",
    "push_notification",
    "list_notifications",
    "mark_notifications_read",
]


def _text(result) -> str:
    """Text of the first content block of a tool result."""
    content = getattr(result, "content", result)
    return content[0].text


@pytest.fixture
def tracker_store() -> Store:
    return Store(storage=MemoryKeyValueStorage())


@pytest.fixture
def client(tracker_store):
    return Client(create_app(store_override=tracker_store))


def test_server_lists_all_tools(client):
    async def _check():
        async with client:
            tools = await client.list_tools()
            names = [t.name for t in tools]
            for expected in ALL_EXPECTED_TOOLS:
                assert expected in names, f"Missing tool: {expected}"
    _run(_check())


def test_health_check_returns_ok(client):
    async def _check():
        async with client:
            result = await client.call_tool("health_check", {})
            assert "ok" in str(result)
    _run(_check())


def test_submit_report_updates_reports_and_consumption(client, tracker_store):
    async def _check():
        async with client:
            result = await client.call_tool("submit_report", {"report_date": "2026-03-01"})
            payload = json.loads(_text(result))
            assert payload["status"] == "submitted"
            assert payload["statistics"]["total"] == 1
    _run(_check())

    state = tracker_store.get_state()
    assert state["reports"]["list"][0]["date"] == "2026-03-01"
    assert state["user"]["vitamin_consumption"]["count"] == 1
    assert state["ui"]["loading"]["submit_report"] is False
    types = [a.type for a in tracker_store.get_history()]
    assert types == ["UI_SET_LOADING", "REPORT_ADD", "USER_INCREMENT_CONSUMPTION", "UI_SET_LOADING"]


def test_list_and_delete_reports(client, tracker_store):
    async def _check():
        async with client:
            first = json.loads(_text(await client.call_tool("submit_report", {"report_date": "2026-03-01"})))
            await client.call_tool("submit_report", {"report_date": "2026-03-02"})

            listed = json.loads(_text(await client.call_tool("list_reports", {"sort_order": "asc"})))
            assert [r["date"] for r in listed["reports"]] == ["2026-03-01", "2026-03-02"]

            deleted = json.loads(_text(await client.call_tool("delete_report", {"report_id": first["report_id"]})))
            assert deleted["status"] == "deleted"
            missing = json.loads(_text(await client.call_tool("delete_report", {"report_id": "nope"})))
            assert missing["status"] == "not_found"
    _run(_check())

    assert tracker_store.get_state()["reports"]["statistics"]["total"] == 1


def test_hemoglobin_and_dashboard(client):
    async def _check():
        async with client:
            await client.call_tool("record_hemoglobin", {"value": 11.0})
            second = json.loads(_text(await client.call_tool("record_hemoglobin", {"value": 12.4})))
            assert second["trend"] == "up"
            assert second["previous"] == 11.0

            rejected = json.loads(_text(await client.call_tool("record_hemoglobin", {"value": 80.0})))
            assert rejected["status"] == "rejected"

            await client.call_tool("record_vitamin_consumption", {})
            summary = json.loads(_text(await client.call_tool("dashboard_summary", {})))
            assert summary["consumption"]["count"] == 1
            assert summary["consumption"]["remaining"] == 47
            assert summary["hemoglobin"]["current"] == 12.4
            assert summary["hemoglobin"]["summary"]["data_points"] == 2
    _run(_check())


def test_notifications_flow(client, tracker_store):
    async def _check():
        async with client:
            added = json.loads(_text(await client.call_tool("push_notification", {"title": "Minum TTD"})))
            assert added["unread_count"] == 1
            await client.call_tool("push_notification", {"title": "Hebat", "notification_type": "achievement"})
            bad = json.loads(_text(await client.call_tool("push_notification", {"title": "x", "notification_type": "spam"})))
            assert bad["status"] == "rejected"

            unread = json.loads(_text(await client.call_tool("list_notifications", {"read": "unread"})))
            assert len(unread["notifications"]) == 2

            done = json.loads(_text(await client.call_tool("mark_notifications_read", {})))
            assert done["unread_count"] == 0
    _run(_check())

    assert all(n["read"] for n in tracker_store.get_state()["notifications"]["list"])


def test_theme_and_history(client, tracker_store):
    async def _check():
        async with client:
            await client.call_tool("set_theme", {"theme": "dark"})
            history = json.loads(_text(await client.call_tool("store_history", {"limit": 1})))
            assert [a["type"] for a in history["actions"]] == ["USER_SET_PREFERENCES"]
            assert history["total"] == 2
    _run(_check())

    state = tracker_store.get_state()
    assert state["ui"]["theme"] == "dark"
    assert state["user"]["preferences"]["theme"] == "dark"


def test_default_app_restores_saved_state(monkeypatch):
    """Without an injected store, saved state is restored on the first tool call."""
    storage = MemoryKeyValueStorage()
    seed = Store(storage=storage)
    seed.dispatch("UI_SET_LANGUAGE", "en")
    _run(seed.persist())

    monkeypatch.setattr("modiva.core.server.app.create_storage", lambda settings: storage)
    client = Client(create_app())

    async def _check():
        async with client:
            await client.call_tool("record_vitamin_consumption", {})
    _run(_check())

    saved = json.loads(_run(storage.get(DEFAULT_PERSIST_KEY)))
    assert saved["ui"]["language"] == "en"
    assert saved["user"]["vitamin_consumption"]["count"] == 1
