"""MCP tools for in-app notifications."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable

from fastmcp import Context, FastMCP

from modiva.core.store.actions import ActionType
from modiva.core.store.store import Store
from modiva.domains.tracker.domain_logic.constants import NOTIFICATION_TYPES
from modiva.domains.tracker.state import notifications


def register_notification_tools(
    mcp: FastMCP,
    store: Store,
    ready: Callable[[], Awaitable[None]],
) -> None:
    """Register notification tools on the MCP server."""

    @mcp.tool
    async def push_notification(
        ctx: Context,
        title: str,
        message: str = "",
        notification_type: str = "info",
    ) -> str:
        """Add an unread notification.

        Args:
            title: Short title.
            message: Body text.
            notification_type: One of reminder, success, motivation, info, warning, error, achievement, system.
        """
        await ready()
        if notification_type not in NOTIFICATION_TYPES:
            return json.dumps({
                "status": "rejected",
                "error": f"Unknown notification type: {notification_type}",
            })
        store.dispatch(ActionType.NOTIFICATION_ADD, {"title": title, "message": message, "type": notification_type})
        await store.flush()
        state = store.get_state_slice("notifications")
        return json.dumps({
            "status": "added",
            "notification_id": state["list"][0]["id"],
            "unread_count": state["unread_count"],
        })

    @mcp.tool
    async def list_notifications(
        ctx: Context, notification_type: str = "all", read: str = "all"
    ) -> str:
        """List notifications.

        Args:
            notification_type: Notification type, or 'all'.
            read: 'all', 'read' or 'unread'.
        """
        await ready()
        store.dispatch(ActionType.NOTIFICATION_SET_FILTER, {"type": notification_type, "read": read})
        await store.flush()
        state = store.get_state_slice("notifications")
        return json.dumps({
            "notifications": notifications.get_filtered_notifications(state),
            "unread_count": state["unread_count"],
        })

    @mcp.tool
    async def mark_notifications_read(ctx: Context, notification_id: int | None = None) -> str:
        """Mark one notification (or all, when no id is given) as read."""
        await ready()
        if notification_id is None:
            store.dispatch(ActionType.NOTIFICATION_MARK_ALL_READ)
        else:
            store.dispatch(ActionType.NOTIFICATION_MARK_READ, notification_id)
        await store.flush()
        return json.dumps({"status": "ok", "unread_count": store.get_state_slice("notifications")["unread_count"]})
