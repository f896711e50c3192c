"""Store middleware.

A middleware is ``fn(action, state_snapshot) -> Action``. It runs before the
action is reduced and may return a modified action; these ones only observe.
"""

from __future__ import annotations

import logging
from typing import Any

from modiva.core.store.actions import ACTION_PAYLOADS, Action, payload_matches, resolve_action_type

logger = logging.getLogger(__name__)


def logging_middleware(action: Action, state: dict[str, Any]) -> Action:
    """Log every action type at DEBUG (payloads are not logged)."""
    logger.debug("Action %s at %d", action.type, action.timestamp)
    return action


def payload_check_middleware(action: Action, state: dict[str, Any]) -> Action:
    """Warn when a payload does not match the documented shape for its action type.

    Never blocks the action: transitions default malformed fields themselves.
    """
    action_type = resolve_action_type(action.type)
    if action_type is None:
        return action
    shape = ACTION_PAYLOADS.get(action_type, "any")
    if not payload_matches(shape, action.payload):
        logger.warning(
            "Payload for %s should be %s, got %s",
            action_type.value, shape, type(action.payload).__name__,
        )
    return action
