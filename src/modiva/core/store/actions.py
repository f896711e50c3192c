"""Action catalog — the closed vocabulary the store's router recognizes.

Every state change in the tracker is requested by dispatching one of these
types. The catalog is an ``Enum`` so it cannot be extended at runtime;
``STORE_RESTORED`` is deliberately *not* a member because it is never
dispatched, only used to tag the notification sent after ``restore()``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Literal


class ActionType(str, Enum):
    """Action-type identifiers, grouped by the slice they target."""

    # Auth
    AUTH_LOGIN = "AUTH_LOGIN"
    AUTH_LOGOUT = "AUTH_LOGOUT"
    AUTH_SET_TOKEN = "AUTH_SET_TOKEN"
    AUTH_REFRESH_TOKEN = "AUTH_REFRESH_TOKEN"
    AUTH_UPDATE_SESSION = "AUTH_UPDATE_SESSION"

    # User
    USER_SET_PROFILE = "USER_SET_PROFILE"
    USER_UPDATE_PROFILE = "USER_UPDATE_PROFILE"
    USER_SET_PREFERENCES = "USER_SET_PREFERENCES"
    USER_INCREMENT_CONSUMPTION = "USER_INCREMENT_CONSUMPTION"
    USER_UPDATE_HB = "USER_UPDATE_HB"
    USER_UPDATE_STATISTICS = "USER_UPDATE_STATISTICS"
    USER_SET_LOADING = "USER_SET_LOADING"
    USER_SET_ERROR = "USER_SET_ERROR"

    # Reports
    REPORT_ADD = "REPORT_ADD"
    REPORT_SET_LIST = "REPORT_SET_LIST"
    REPORT_UPDATE = "REPORT_UPDATE"
    REPORT_DELETE = "REPORT_DELETE"
    REPORT_SET_FILTER = "REPORT_SET_FILTER"
    REPORT_SET_LOADING = "REPORT_SET_LOADING"
    REPORT_SET_CURRENT = "REPORT_SET_CURRENT"
    REPORT_SET_PAGINATION = "REPORT_SET_PAGINATION"
    REPORT_SET_ERROR = "REPORT_SET_ERROR"

    # Notifications
    NOTIFICATION_SET_LIST = "NOTIFICATION_SET_LIST"
    NOTIFICATION_ADD = "NOTIFICATION_ADD"
    NOTIFICATION_MARK_READ = "NOTIFICATION_MARK_READ"
    NOTIFICATION_MARK_ALL_READ = "NOTIFICATION_MARK_ALL_READ"
    NOTIFICATION_DELETE = "NOTIFICATION_DELETE"
    NOTIFICATION_SET_UNREAD_COUNT = "NOTIFICATION_SET_UNREAD_COUNT"
    NOTIFICATION_DELETE_ALL = "NOTIFICATION_DELETE_ALL"
    NOTIFICATION_SET_FILTER = "NOTIFICATION_SET_FILTER"
    NOTIFICATION_SET_LOADING = "NOTIFICATION_SET_LOADING"
    NOTIFICATION_SET_ERROR = "NOTIFICATION_SET_ERROR"

    # UI
    UI_SET_LOADING = "UI_SET_LOADING"
    UI_SET_GLOBAL_LOADING = "UI_SET_GLOBAL_LOADING"
    UI_SHOW_MODAL = "UI_SHOW_MODAL"
    UI_HIDE_MODAL = "UI_HIDE_MODAL"
    UI_SHOW_TOAST = "UI_SHOW_TOAST"
    UI_HIDE_TOAST = "UI_HIDE_TOAST"
    UI_SET_THEME = "UI_SET_THEME"
    UI_SET_LANGUAGE = "UI_SET_LANGUAGE"
    UI_SET_CURRENT_SCREEN = "UI_SET_CURRENT_SCREEN"
    UI_TOGGLE_BOTTOM_NAV = "UI_TOGGLE_BOTTOM_NAV"
    UI_SET_ACTIVE_TAB = "UI_SET_ACTIVE_TAB"
    UI_TOGGLE_DRAWER = "UI_TOGGLE_DRAWER"
    UI_SET_APP_BAR = "UI_SET_APP_BAR"
    UI_SET_SCREEN_STATE = "UI_SET_SCREEN_STATE"
    UI_SET_SCROLL_POSITION = "UI_SET_SCROLL_POSITION"
    UI_SHOW_OVERLAY = "UI_SHOW_OVERLAY"
    UI_HIDE_OVERLAY = "UI_HIDE_OVERLAY"

    # App
    APP_INIT = "APP_INIT"
    APP_RESET = "APP_RESET"


# Tag for the synthetic notification sent after restore(); not dispatchable.
STORE_RESTORED = "STORE_RESTORED"


def resolve_action_type(value: ActionType | str) -> ActionType | None:
    """Map a string to its catalog member, or None if it is not in the catalog."""
    if isinstance(value, ActionType):
        return value
    try:
        return ActionType(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Action:
    """A ``(type, payload, timestamp)`` record describing a requested transition."""

    type: str
    payload: Any = None
    timestamp: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Payload contracts
# ---------------------------------------------------------------------------

PayloadShape = Literal["none", "mapping", "list", "text", "number", "flag", "id", "any"]

ACTION_PAYLOADS: dict[ActionType, PayloadShape] = {
    ActionType.AUTH_LOGIN: "mapping",            # {token, refresh_token?, expires_in?, remember_me?}
    ActionType.AUTH_LOGOUT: "none",
    ActionType.AUTH_SET_TOKEN: "mapping",        # {token, expires_in?}
    ActionType.AUTH_REFRESH_TOKEN: "mapping",    # {token, refresh_token?, expires_in?}
    ActionType.AUTH_UPDATE_SESSION: "mapping",   # {session_id?, remember_me?}
    ActionType.USER_SET_PROFILE: "mapping",
    ActionType.USER_UPDATE_PROFILE: "mapping",
    ActionType.USER_SET_PREFERENCES: "mapping",
    ActionType.USER_INCREMENT_CONSUMPTION: "none",
    ActionType.USER_UPDATE_HB: "number",         # g/dL
    ActionType.USER_UPDATE_STATISTICS: "mapping",
    ActionType.USER_SET_LOADING: "flag",
    ActionType.USER_SET_ERROR: "text",
    ActionType.REPORT_ADD: "mapping",
    ActionType.REPORT_SET_LIST: "list",
    ActionType.REPORT_UPDATE: "mapping",         # {id, updates}
    ActionType.REPORT_DELETE: "id",
    ActionType.REPORT_SET_FILTER: "mapping",
    ActionType.REPORT_SET_LOADING: "flag",
    ActionType.REPORT_SET_CURRENT: "any",
    ActionType.REPORT_SET_PAGINATION: "mapping",
    ActionType.REPORT_SET_ERROR: "text",
    ActionType.NOTIFICATION_SET_LIST: "list",
    ActionType.NOTIFICATION_ADD: "mapping",
    ActionType.NOTIFICATION_MARK_READ: "id",
    ActionType.NOTIFICATION_MARK_ALL_READ: "none",
    ActionType.NOTIFICATION_DELETE: "id",
    ActionType.NOTIFICATION_SET_UNREAD_COUNT: "any",
    ActionType.NOTIFICATION_DELETE_ALL: "none",
    ActionType.NOTIFICATION_SET_FILTER: "mapping",
    ActionType.NOTIFICATION_SET_LOADING: "flag",
    ActionType.NOTIFICATION_SET_ERROR: "text",
    ActionType.UI_SET_LOADING: "mapping",        # {key, is_loading}
    ActionType.UI_SET_GLOBAL_LOADING: "flag",
    ActionType.UI_SHOW_MODAL: "mapping",
    ActionType.UI_HIDE_MODAL: "none",
    ActionType.UI_SHOW_TOAST: "mapping",
    ActionType.UI_HIDE_TOAST: "none",
    ActionType.UI_SET_THEME: "text",
    ActionType.UI_SET_LANGUAGE: "text",
    ActionType.UI_SET_CURRENT_SCREEN: "text",
    ActionType.UI_TOGGLE_BOTTOM_NAV: "flag",
    ActionType.UI_SET_ACTIVE_TAB: "text",
    ActionType.UI_TOGGLE_DRAWER: "mapping",      # {is_open?, content?}
    ActionType.UI_SET_APP_BAR: "mapping",
    ActionType.UI_SET_SCREEN_STATE: "mapping",   # {screen, updates}
    ActionType.UI_SET_SCROLL_POSITION: "mapping",  # {screen, position}
    ActionType.UI_SHOW_OVERLAY: "any",           # opacity or None
    ActionType.UI_HIDE_OVERLAY: "none",
    ActionType.APP_INIT: "any",
    ActionType.APP_RESET: "none",
}


def payload_matches(shape: PayloadShape, payload: Any) -> bool:
    """Whether ``payload`` has the documented shape."""
    if shape == "any":
        return True
    if shape == "none":
        return payload is None
    if shape == "mapping":
        return isinstance(payload, dict)
    if shape == "list":
        return isinstance(payload, list)
    if shape == "text":
        return isinstance(payload, str)
    if shape == "flag":
        return isinstance(payload, bool)
    if shape == "number":
        return isinstance(payload, (int, float)) and not isinstance(payload, bool)
    if shape == "id":
        return isinstance(payload, (str, int)) and not isinstance(payload, bool)
    return False
