"""Notification slice.

``unread_count`` always equals the number of entries in ``list`` with
``read`` false. Add bumps the count by one; every other transition that
touches ``list`` recounts, since ids are not guaranteed unique.
"""

from __future__ import annotations

from typing import Any

from modiva.core.store import clock


def get_initial_state() -> dict[str, Any]:
    return {
        "list": [],
        "unread_count": 0,
        "filters": {
            "type": "all",
            "read": "all",
        },
        "loading": False,
        "error": None,
    }


def count_unread(notifications: list[dict[str, Any]]) -> int:
    return sum(1 for n in notifications if not n.get("read"))


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def set_notifications(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    notifications = (
        [n for n in payload if isinstance(n, dict)] if isinstance(payload, list) else []
    )
    return {
        **state,
        "list": notifications,
        "unread_count": count_unread(notifications),
        "loading": False,
        "error": None,
    }


def add_notification(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    """Prepend a new unread notification with a generated id and timestamp."""
    data = payload if isinstance(payload, dict) else {}
    now = clock.now_ms()
    notification_id = now
    # Linear scan: restored lists may carry unhashable ids.
    while any(n.get("id") == notification_id for n in state["list"]):
        notification_id += 1

    notification = {**data, "id": notification_id, "read": False, "timestamp": now}
    return {
        **state,
        "list": [notification, *state["list"]],
        "unread_count": state["unread_count"] + 1,
    }


def mark_as_read(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    notifications = [
        {**n, "read": True} if n.get("id") == payload else n for n in state["list"]
    ]
    return {**state, "list": notifications, "unread_count": count_unread(notifications)}


def mark_all_as_read(state: dict[str, Any], payload: Any = None) -> dict[str, Any]:
    notifications = [{**n, "read": True} for n in state["list"]]
    return {**state, "list": notifications, "unread_count": 0}


def delete_notification(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    notifications = [n for n in state["list"] if n.get("id") != payload]
    if len(notifications) == len(state["list"]):
        return state
    return {**state, "list": notifications, "unread_count": count_unread(notifications)}


def delete_all(state: dict[str, Any], payload: Any = None) -> dict[str, Any]:
    return {**state, "list": [], "unread_count": 0}


def recount_unread(state: dict[str, Any], payload: Any = None) -> dict[str, Any]:
    return {**state, "unread_count": count_unread(state["list"])}


def set_filter(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    updates = payload if isinstance(payload, dict) else {}
    return {**state, "filters": {**state["filters"], **updates}}


def set_loading(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "loading": bool(payload)}


def set_error(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "error": payload, "loading": False}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_filtered_notifications(state: dict[str, Any]) -> list[dict[str, Any]]:
    filters = state["filters"]
    filtered = list(state["list"])
    if filters.get("type", "all") != "all":
        filtered = [n for n in filtered if n.get("type") == filters["type"]]
    if filters.get("read") == "read":
        filtered = [n for n in filtered if n.get("read") is True]
    elif filters.get("read") == "unread":
        filtered = [n for n in filtered if not n.get("read")]
    return filtered


def get_unread_notifications(state: dict[str, Any]) -> list[dict[str, Any]]:
    return [n for n in state["list"] if not n.get("read")]


def get_notifications_by_type(state: dict[str, Any], notification_type: str) -> list[dict[str, Any]]:
    return [n for n in state["list"] if n.get("type") == notification_type]
