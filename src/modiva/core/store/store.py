"""Central store — owns the state tree and the dispatch/reduce loop.

Usage::

    store = Store(storage=MemoryKeyValueStorage())
    store.subscribe(lambda new, prev, action: print(action.type))
    store.dispatch(ActionType.USER_INCREMENT_CONSUMPTION)
    store.get_state()["user"]["vitamin_consumption"]["count"]  # 1

Every read hands out a deep copy, so nothing outside the store can mutate
the tree. Transition functions are pure and return new slice objects; a
slice counts as changed when its object was replaced by an unequal one.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from modiva.core.config.settings import Settings, get_settings
from modiva.core.storage.kv import KeyValueStorage, MemoryKeyValueStorage, create_storage
from modiva.core.store import clock
from modiva.core.store.actions import STORE_RESTORED, Action, ActionType, resolve_action_type
from modiva.domains.tracker.state import auth, notifications, reports, ui, user

logger = logging.getLogger(__name__)

Subscriber = Callable[[dict[str, Any], dict[str, Any], Action], None]
Middleware = Callable[[Action, dict[str, Any]], Action]

DEFAULT_PERSIST_KEY = "modiva_store_state"
DEFAULT_MAX_HISTORY = 50

SLICE_MODULES = {
    "auth": auth,
    "user": user,
    "reports": reports,
    "notifications": notifications,
    "ui": ui,
}

# action type -> (slice name, transition)
_ROUTES: dict[ActionType, tuple[str, Callable[[dict[str, Any], Any], dict[str, Any]]]] = {
    ActionType.AUTH_LOGIN: ("auth", auth.login),
    ActionType.AUTH_SET_TOKEN: ("auth", auth.set_token),
    ActionType.AUTH_REFRESH_TOKEN: ("auth", auth.refresh_token),
    ActionType.AUTH_UPDATE_SESSION: ("auth", auth.update_session),
    ActionType.USER_SET_PROFILE: ("user", user.set_profile),
    ActionType.USER_UPDATE_PROFILE: ("user", user.update_profile),
    ActionType.USER_SET_PREFERENCES: ("user", user.set_preferences),
    ActionType.USER_INCREMENT_CONSUMPTION: ("user", user.increment_consumption),
    ActionType.USER_UPDATE_HB: ("user", user.update_hb),
    ActionType.USER_UPDATE_STATISTICS: ("user", user.update_statistics),
    ActionType.USER_SET_LOADING: ("user", user.set_loading),
    ActionType.USER_SET_ERROR: ("user", user.set_error),
    ActionType.REPORT_ADD: ("reports", reports.add_report),
    ActionType.REPORT_SET_LIST: ("reports", reports.set_reports),
    ActionType.REPORT_UPDATE: ("reports", reports.update_report),
    ActionType.REPORT_DELETE: ("reports", reports.delete_report),
    ActionType.REPORT_SET_FILTER: ("reports", reports.set_filter),
    ActionType.REPORT_SET_LOADING: ("reports", reports.set_loading),
    ActionType.REPORT_SET_CURRENT: ("reports", reports.set_current_report),
    ActionType.REPORT_SET_PAGINATION: ("reports", reports.set_pagination),
    ActionType.REPORT_SET_ERROR: ("reports", reports.set_error),
    ActionType.NOTIFICATION_SET_LIST: ("notifications", notifications.set_notifications),
    ActionType.NOTIFICATION_ADD: ("notifications", notifications.add_notification),
    ActionType.NOTIFICATION_MARK_READ: ("notifications", notifications.mark_as_read),
    ActionType.NOTIFICATION_MARK_ALL_READ: ("notifications", notifications.mark_all_as_read),
    ActionType.NOTIFICATION_DELETE: ("notifications", notifications.delete_notification),
    ActionType.NOTIFICATION_SET_UNREAD_COUNT: ("notifications", notifications.recount_unread),
    ActionType.NOTIFICATION_DELETE_ALL: ("notifications", notifications.delete_all),
    ActionType.NOTIFICATION_SET_FILTER: ("notifications", notifications.set_filter),
    ActionType.NOTIFICATION_SET_LOADING: ("notifications", notifications.set_loading),
    ActionType.NOTIFICATION_SET_ERROR: ("notifications", notifications.set_error),
    ActionType.UI_SET_LOADING: ("ui", ui.set_loading),
    ActionType.UI_SET_GLOBAL_LOADING: ("ui", ui.set_global_loading),
    ActionType.UI_SHOW_MODAL: ("ui", ui.show_modal),
    ActionType.UI_HIDE_MODAL: ("ui", ui.hide_modal),
    ActionType.UI_SHOW_TOAST: ("ui", ui.show_toast),
    ActionType.UI_HIDE_TOAST: ("ui", ui.hide_toast),
    ActionType.UI_SET_THEME: ("ui", ui.set_theme),
    ActionType.UI_SET_LANGUAGE: ("ui", ui.set_language),
    ActionType.UI_SET_CURRENT_SCREEN: ("ui", ui.set_current_screen),
    ActionType.UI_TOGGLE_BOTTOM_NAV: ("ui", ui.toggle_bottom_nav),
    ActionType.UI_SET_ACTIVE_TAB: ("ui", ui.set_active_tab),
    ActionType.UI_TOGGLE_DRAWER: ("ui", ui.toggle_drawer),
    ActionType.UI_SET_APP_BAR: ("ui", ui.set_app_bar),
    ActionType.UI_SET_SCREEN_STATE: ("ui", ui.set_screen_ui_state),
    ActionType.UI_SET_SCROLL_POSITION: ("ui", ui.set_scroll_position),
    ActionType.UI_SHOW_OVERLAY: ("ui", ui.show_overlay),
    ActionType.UI_HIDE_OVERLAY: ("ui", ui.hide_overlay),
}


def initial_state() -> dict[str, dict[str, Any]]:
    """A fresh state tree built from every domain's ``get_initial_state()``."""
    return {name: module.get_initial_state() for name, module in SLICE_MODULES.items()}


@dataclass(frozen=True)
class StoreInfo:
    subscriber_count: int
    middleware_count: int
    history_size: int
    state_size: int


class Store:
    """State container with middleware, subscribers, bounded history and persistence.

    Args:
        max_history_size: Number of past actions kept for diagnostics.
        storage: Key-value backend used by ``persist()`` / ``restore()``.
        persist_key: Key the persisted subset is stored under.
        persist_delay_ms: Trailing debounce for auto-persist; 0 writes on
            every change.
    """

    def __init__(
        self,
        *,
        max_history_size: int = DEFAULT_MAX_HISTORY,
        storage: KeyValueStorage | None = None,
        persist_key: str = DEFAULT_PERSIST_KEY,
        persist_delay_ms: int = 0,
    ) -> None:
        self._state = initial_state()
        self._subscribers: list[Subscriber] = []
        self._middleware: list[Middleware] = []
        self._history: deque[Action] = deque(maxlen=max(1, max_history_size))
        self._storage: KeyValueStorage = storage if storage is not None else MemoryKeyValueStorage()
        self._persist_key = persist_key
        self._persist_delay_ms = max(0, persist_delay_ms)
        self._auto_persist_unsubscribe: Callable[[], None] | None = None
        self._persist_tasks: set[asyncio.Task] = set()
        self._debounce_task: asyncio.Task | None = None
        logger.info("Store initialized (history=%d)", self._history.maxlen)

    @property
    def max_history_size(self) -> int:
        return self._history.maxlen

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_state(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self._state)

    def get_state_slice(self, name: str) -> dict[str, Any]:
        """Deep copy of one slice.

        Raises:
            KeyError: If ``name`` is not a slice of the tree.
        """
        if name not in self._state:
            raise KeyError(f"Unknown state slice: {name!r}")
        return copy.deepcopy(self._state[name])

    # ---------------------------------------------------------------
    # Dispatch
    # ---------------------------------------------------------------

    def dispatch(self, action_type: ActionType | str, payload: Any = None) -> Action:
        """Apply an action and return it as processed by the middleware chain.

        Unknown action types are logged and change nothing. Exceptions raised
        by a transition propagate to the caller.
        """
        type_value = action_type.value if isinstance(action_type, ActionType) else action_type
        action = Action(type=type_value, payload=copy.deepcopy(payload), timestamp=clock.now_ms())
        logger.debug("Dispatch %s", action.type)

        for middleware in self._middleware:
            result = middleware(action, self.get_state())
            if isinstance(result, Action):
                action = result
            else:
                logger.warning(
                    "Middleware %r returned %s instead of an Action; ignoring it",
                    middleware, type(result).__name__,
                )

        prev_tree = dict(self._state)
        self._reduce(action)
        changed = [
            name for name, slice_ in self._state.items()
            if slice_ is not prev_tree.get(name) and slice_ != prev_tree.get(name)
        ]

        if changed:
            self._notify(self.get_state(), copy.deepcopy(prev_tree), action)

        self._history.append(action)
        return action

    def _reduce(self, action: Action) -> None:
        action_type = resolve_action_type(action.type)
        if action_type is None:
            logger.warning("Unknown action type: %s", action.type)
            return

        if action_type is ActionType.APP_RESET:
            self._state = initial_state()
            return
        if action_type is ActionType.APP_INIT:
            return
        if action_type is ActionType.AUTH_LOGOUT:
            self._state["auth"] = auth.logout(self._state["auth"])
            self._state["user"] = user.get_initial_state()
            return

        slice_name, transition = _ROUTES[action_type]
        self._state[slice_name] = transition(self._state[slice_name], action.payload)

    def reset(self) -> None:
        self.dispatch(ActionType.APP_RESET)
        logger.info("Store reset")

    # ---------------------------------------------------------------
    # Subscribers and middleware
    # ---------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback(new_state, prev_state, action)``; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def use(self, middleware: Middleware) -> None:
        self._middleware.append(middleware)

    def _notify(self, new_state: dict[str, Any], prev_state: dict[str, Any], action: Action) -> None:
        for callback in list(self._subscribers):
            try:
                callback(new_state, prev_state, action)
            except Exception:
                logger.exception("Subscriber %r failed on %s", callback, action.type)

    # ---------------------------------------------------------------
    # History
    # ---------------------------------------------------------------

    def get_history(self) -> list[Action]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    def get_info(self) -> StoreInfo:
        return StoreInfo(
            subscriber_count=len(self._subscribers),
            middleware_count=len(self._middleware),
            history_size=len(self._history),
            state_size=len(json.dumps(self._state, default=str)),
        )

    # ---------------------------------------------------------------
    # Persistence
    # ---------------------------------------------------------------

    def _persisted_subset(self) -> dict[str, Any]:
        return {
            "auth": self._state["auth"],
            "user": self._state["user"],
            "ui": {
                "theme": self._state["ui"]["theme"],
                "language": self._state["ui"]["language"],
            },
        }

    async def persist(self) -> None:
        """Write ``{auth, user, ui: {theme, language}}`` to storage. Failures are logged."""
        try:
            await self._storage.set(self._persist_key, json.dumps(self._persisted_subset()))
            logger.debug("State persisted under %s", self._persist_key)
        except Exception:
            logger.exception("Failed to persist state")

    async def restore(self) -> bool:
        """Merge the persisted subset back into the tree.

        Subscribers are notified with a ``STORE_RESTORED`` action when
        anything was found. Returns True if state was restored.
        """
        try:
            raw = await self._storage.get(self._persist_key)
            if not raw:
                return False
            persisted = json.loads(raw)
            if not isinstance(persisted, dict):
                logger.warning("Ignoring persisted state of type %s", type(persisted).__name__)
                return False

            prev_state = self.get_state()
            if isinstance(persisted.get("auth"), dict):
                self._state["auth"] = persisted["auth"]
            if isinstance(persisted.get("user"), dict):
                self._state["user"] = persisted["user"]
            if isinstance(persisted.get("ui"), dict):
                self._state["ui"] = {
                    **self._state["ui"],
                    "theme": persisted["ui"].get("theme", self._state["ui"]["theme"]),
                    "language": persisted["ui"].get("language", self._state["ui"]["language"]),
                }
        except Exception:
            logger.exception("Failed to restore state")
            return False

        logger.info("State restored from storage")
        self._notify(
            self.get_state(),
            prev_state,
            Action(type=STORE_RESTORED, payload=None, timestamp=clock.now_ms()),
        )
        return True

    def enable_auto_persist(self) -> None:
        """Persist after every state change (debounced by ``persist_delay_ms``)."""
        if self._auto_persist_unsubscribe is None:
            self._auto_persist_unsubscribe = self.subscribe(self._schedule_persist)

    def disable_auto_persist(self) -> None:
        if self._auto_persist_unsubscribe is not None:
            self._auto_persist_unsubscribe()
            self._auto_persist_unsubscribe = None

    def _schedule_persist(self, new_state: dict[str, Any], prev_state: dict[str, Any], action: Action) -> None:
        if action.type == STORE_RESTORED:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: nothing would run a task, so write inline.
            asyncio.run(self.persist())
            return

        if self._persist_delay_ms == 0:
            self._track(loop.create_task(self.persist()))
            return
        if self._debounce_task is not None:
            self._debounce_task.cancel()
        self._debounce_task = self._track(loop.create_task(self._persist_later()))

    async def _persist_later(self) -> None:
        await asyncio.sleep(self._persist_delay_ms / 1000)
        self._debounce_task = None
        await self.persist()

    def _track(self, task: asyncio.Task) -> asyncio.Task:
        self._persist_tasks.add(task)
        task.add_done_callback(self._persist_tasks.discard)
        return task

    async def flush(self) -> None:
        """Wait for scheduled writes; a pending debounced write runs immediately."""
        debounced = self._debounce_task is not None
        if debounced:
            self._debounce_task.cancel()
            self._debounce_task = None
        if self._persist_tasks:
            await asyncio.gather(*list(self._persist_tasks), return_exceptions=True)
        if debounced:
            await self.persist()


async def create_store(
    settings: Settings | None = None, storage: KeyValueStorage | None = None
) -> Store:
    """Build a store from settings, enable auto-persist and restore saved state."""
    settings = settings or get_settings()
    store = Store(
        max_history_size=settings.store_max_history,
        storage=storage if storage is not None else create_storage(settings),
        persist_key=settings.store_persist_key,
        persist_delay_ms=settings.store_persist_delay_ms,
    )
    store.enable_auto_persist()
    await store.restore()
    return store
