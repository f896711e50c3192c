"""UI slice — ephemeral screen flags. Only ``theme`` and ``language`` are persisted."""

from __future__ import annotations

from typing import Any

from modiva.domains.tracker.domain_logic.constants import (
    DEFAULT_OVERLAY_OPACITY,
    DEFAULT_TOAST_DURATION_MS,
    NAVIGATION_HISTORY_LIMIT,
)


def _closed_modal() -> dict[str, Any]:
    return {"is_open": False, "type": None, "title": None, "message": None, "data": None}


def _hidden_toast() -> dict[str, Any]:
    return {
        "is_visible": False,
        "type": "info",
        "message": None,
        "duration": DEFAULT_TOAST_DURATION_MS,
    }


def _overlay(visible: bool, opacity: float = DEFAULT_OVERLAY_OPACITY) -> dict[str, Any]:
    return {"is_visible": visible, "opacity": opacity}


def get_initial_state() -> dict[str, Any]:
    return {
        "loading": {},
        "global_loading": False,
        "modal": _closed_modal(),
        "toast": _hidden_toast(),
        "theme": "light",
        "language": "id",
        "current_screen": None,
        "previous_screen": None,
        "navigation_history": [],
        "show_bottom_nav": True,
        "active_tab": "home",
        "drawer": {"is_open": False, "content": None},
        "app_bar": {"title": "Modiva", "show_back_button": False, "actions": []},
        "screens": {
            "home": {"scroll_position": 0},
            "reports": {"scroll_position": 0, "view_mode": "list"},
            "notifications": {"scroll_position": 0},
            "profile": {"scroll_position": 0},
        },
        "overlay": _overlay(False),
    }


def _mapping(payload: Any) -> dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def set_loading(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    data = _mapping(payload)
    key = data.get("key")
    if not isinstance(key, str):
        return state
    return {**state, "loading": {**state["loading"], key: bool(data.get("is_loading"))}}


def set_global_loading(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "global_loading": bool(payload)}


def show_modal(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    data = _mapping(payload)
    return {
        **state,
        "modal": {
            "is_open": True,
            "type": data.get("type") or "custom",
            "title": data.get("title") or None,
            "message": data.get("message") or None,
            "data": data.get("data") or None,
        },
        "overlay": _overlay(True),
    }


def hide_modal(state: dict[str, Any], payload: Any = None) -> dict[str, Any]:
    return {**state, "modal": _closed_modal(), "overlay": _overlay(False)}


def show_toast(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    data = _mapping(payload)
    return {
        **state,
        "toast": {
            "is_visible": True,
            "type": data.get("type") or "info",
            "message": data.get("message") or "",
            "duration": data.get("duration") or DEFAULT_TOAST_DURATION_MS,
        },
    }


def hide_toast(state: dict[str, Any], payload: Any = None) -> dict[str, Any]:
    return {**state, "toast": _hidden_toast()}


def set_theme(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "theme": payload}


def set_language(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "language": payload}


def set_current_screen(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    history = [*state["navigation_history"], payload][-NAVIGATION_HISTORY_LIMIT:]
    return {
        **state,
        "current_screen": payload,
        "previous_screen": state["current_screen"],
        "navigation_history": history,
    }


def toggle_bottom_nav(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "show_bottom_nav": bool(payload)}


def set_active_tab(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "active_tab": payload}


def toggle_drawer(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    """Open/close the drawer. Without ``is_open`` the current state is flipped."""
    data = _mapping(payload)
    is_open = bool(data["is_open"]) if "is_open" in data else not state["drawer"]["is_open"]
    return {
        **state,
        "drawer": {"is_open": is_open, "content": data.get("content") or None},
        "overlay": _overlay(is_open),
    }


def set_app_bar(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "app_bar": {**state["app_bar"], **_mapping(payload)}}


def set_screen_ui_state(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    data = _mapping(payload)
    screen = data.get("screen")
    if not isinstance(screen, str):
        return state
    return {
        **state,
        "screens": {
            **state["screens"],
            screen: {**state["screens"].get(screen, {}), **_mapping(data.get("updates"))},
        },
    }


def set_scroll_position(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    data = _mapping(payload)
    screen = data.get("screen")
    if not isinstance(screen, str):
        return state
    return {
        **state,
        "screens": {
            **state["screens"],
            screen: {**state["screens"].get(screen, {}), "scroll_position": data.get("position", 0)},
        },
    }


def show_overlay(state: dict[str, Any], payload: Any = None) -> dict[str, Any]:
    opacity = payload if isinstance(payload, (int, float)) and not isinstance(payload, bool) else 0
    return {**state, "overlay": _overlay(True, opacity or DEFAULT_OVERLAY_OPACITY)}


def hide_overlay(state: dict[str, Any], payload: Any = None) -> dict[str, Any]:
    return {**state, "overlay": _overlay(False)}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def is_any_loading(state: dict[str, Any]) -> bool:
    return bool(state["global_loading"]) or any(state["loading"].values())


def get_screen_ui_state(state: dict[str, Any], screen: str) -> dict[str, Any]:
    return state["screens"].get(screen, {})
