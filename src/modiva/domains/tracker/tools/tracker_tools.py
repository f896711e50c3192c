"""MCP tools for consumption and hemoglobin tracking.

Tools never touch the state tree directly: every change goes through
``store.dispatch`` and every read through ``store.get_state_slice``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable

from fastmcp import Context, FastMCP

from modiva.core.store.actions import ActionType
from modiva.core.store.store import Store
from modiva.domains.tracker.domain_logic import consumption, hemoglobin
from modiva.domains.tracker.domain_logic.constants import HB_MAX_VALUE, HB_MIN_VALUE
from modiva.domains.tracker.state import notifications, user

logger = logging.getLogger(__name__)


def register_tracker_tools(
    mcp: FastMCP,
    store: Store,
    ready: Callable[[], Awaitable[None]],
) -> None:
    """Register consumption, HB, dashboard and preference tools on the MCP server."""

    @mcp.tool
    async def record_vitamin_consumption(ctx: Context) -> str:
        """Record that today's iron supplement tablet was taken."""
        await ready()
        store.dispatch(ActionType.USER_INCREMENT_CONSUMPTION)
        await store.flush()

        vc = store.get_state_slice("user")["vitamin_consumption"]
        logger.info("Vitamin consumption recorded: %d/%d", vc["count"], vc["target"])
        return json.dumps({
            "status": "recorded",
            "count": vc["count"],
            "target": vc["target"],
            "percentage": vc["percentage"],
            "remaining": consumption.remaining(vc["count"], vc["target"]),
            "target_reached": consumption.is_target_reached(vc["count"], vc["target"]),
        })

    @mcp.tool
    async def record_hemoglobin(ctx: Context, value: float) -> str:
        """Record a hemoglobin reading.

        Args:
            value: Hemoglobin in g/dL (e.g., 12.5).
        """
        await ready()
        if not hemoglobin.is_plausible(value):
            return json.dumps({
                "status": "rejected",
                "error": f"HB value must be between {HB_MIN_VALUE} and {HB_MAX_VALUE} g/dL",
            })

        store.dispatch(ActionType.USER_UPDATE_HB, value)
        await store.flush()

        state = store.get_state_slice("user")
        hb = state["hemoglobin"]
        return json.dumps({
            "status": "recorded",
            "current": hb["current"],
            "previous": hb["previous"],
            "trend": hb["trend"],
            "hb_status": user.get_hb_status(state),
            "comparison": hemoglobin.compare(hb["current"], hb["previous"]),
        })

    @mcp.tool
    async def dashboard_summary(ctx: Context) -> str:
        """Summarize consumption progress, HB status, reports and unread notifications."""
        await ready()
        state = store.get_state()
        profile = state["user"]["profile"]
        vc = state["user"]["vitamin_consumption"]
        hb = state["user"]["hemoglobin"]
        return json.dumps({
            "consumption": {
                **vc,
                "remaining": consumption.remaining(vc["count"], vc["target"]),
                "next_allowed_at": consumption.next_allowed_at(vc["last_consumed"]),
            },
            "hemoglobin": {
                "current": hb["current"],
                "trend": hb["trend"],
                "status": user.get_hb_status(state["user"]),
                "summary": hemoglobin.summarize(hb["history"], profile.get("gender")),
            },
            "reports": state["reports"]["statistics"],
            "unread_notifications": len(notifications.get_unread_notifications(state["notifications"])),
        })

    @mcp.tool
    async def set_theme(ctx: Context, theme: str) -> str:
        """Set the app theme ('light', 'dark' or 'auto')."""
        await ready()
        store.dispatch(ActionType.UI_SET_THEME, theme)
        store.dispatch(ActionType.USER_SET_PREFERENCES, {"theme": theme})
        await store.flush()
        return json.dumps({"status": "ok", "theme": theme})

    @mcp.tool
    async def set_language(ctx: Context, language: str) -> str:
        """Set the app language ('id' or 'en')."""
        await ready()
        store.dispatch(ActionType.UI_SET_LANGUAGE, language)
        store.dispatch(ActionType.USER_SET_PREFERENCES, {"language": language})
        await store.flush()
        return json.dumps({"status": "ok", "language": language})

    @mcp.tool
    async def store_history(ctx: Context, limit: int = 20) -> str:
        """List the most recent dispatched action types (payloads are omitted).

        Args:
            limit: Maximum number of actions to return, newest last.
        """
        await ready()
        history = store.get_history()[-max(0, limit):] if limit > 0 else []
        return json.dumps({
            "actions": [{"type": a.type, "timestamp": a.timestamp} for a in history],
            "total": len(store.get_history()),
        })
