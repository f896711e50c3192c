"""MCP tools for consumption reports."""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from fastmcp import Context, FastMCP

from modiva.core.store.actions import ActionType
from modiva.core.store.store import Store
from modiva.domains.tracker.state import reports

logger = logging.getLogger(__name__)


def register_report_tools(
    mcp: FastMCP,
    store: Store,
    ready: Callable[[], Awaitable[None]],
) -> None:
    """Register report submission and listing tools on the MCP server."""

    @mcp.tool
    async def submit_report(
        ctx: Context,
        report_date: str = "",
        notes: str = "",
        photo_url: str = "",
    ) -> str:
        """Submit a vitamin consumption report. Also counts one tablet taken.

        Args:
            report_date: Date the tablet was taken (ISO 8601). Defaults to today.
            notes: Optional notes.
            photo_url: Optional link to the proof photo.
        """
        await ready()
        if not report_date:
            report_date = datetime.now(timezone.utc).strftime("%Y-%m-%d")

        report = {
            "id": uuid.uuid4().hex,
            "date": report_date,
            "status": "pending",
            "notes": notes,
            "photo_url": photo_url or None,
        }
        store.dispatch(ActionType.UI_SET_LOADING, {"key": "submit_report", "is_loading": True})
        try:
            store.dispatch(ActionType.REPORT_ADD, report)
            store.dispatch(ActionType.USER_INCREMENT_CONSUMPTION)
        finally:
            store.dispatch(ActionType.UI_SET_LOADING, {"key": "submit_report", "is_loading": False})
        await store.flush()

        logger.info("Report %s submitted for %s", report["id"], report_date)
        return json.dumps({
            "status": "submitted",
            "report_id": report["id"],
            "report_date": report_date,
            "statistics": store.get_state_slice("reports")["statistics"],
        })

    @mcp.tool
    async def list_reports(
        ctx: Context,
        status: str = "all",
        date_from: str = "",
        date_to: str = "",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> str:
        """List reports with filters and pagination.

        Args:
            status: 'all', 'pending', 'completed', 'rejected', ...
            date_from: Inclusive lower date bound (ISO 8601).
            date_to: Inclusive upper date bound (ISO 8601).
            sort_order: 'asc' or 'desc' by report date.
            page: 1-based page number.
            limit: Page size.
        """
        await ready()
        store.dispatch(ActionType.REPORT_SET_FILTER, {
            "status": status or "all",
            "date_from": date_from or None,
            "date_to": date_to or None,
            "sort_by": "date",
            "sort_order": sort_order,
        })
        store.dispatch(ActionType.REPORT_SET_PAGINATION, {"page": max(1, page), "limit": max(1, limit)})
        await store.flush()

        state = store.get_state_slice("reports")
        filtered = reports.get_filtered_reports(state)
        return json.dumps({
            "reports": reports.get_paginated_reports(state),
            "matching": len(filtered),
            "page": state["pagination"]["page"],
            "limit": state["pagination"]["limit"],
            "statistics": state["statistics"],
        })

    @mcp.tool
    async def delete_report(ctx: Context, report_id: str) -> str:
        """Delete a report by id."""
        await ready()
        before = store.get_state_slice("reports")["statistics"]["total"]
        store.dispatch(ActionType.REPORT_DELETE, report_id)
        await store.flush()
        after = store.get_state_slice("reports")["statistics"]["total"]
        return json.dumps({"status": "deleted" if after < before else "not_found", "report_id": report_id})
