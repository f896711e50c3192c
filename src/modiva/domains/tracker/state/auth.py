"""Auth slice — login session and token lifetime.

Invariant: ``is_logged_in`` implies ``token`` and ``token_expiry`` are set.
A login payload without a token therefore produces a logged-out slice.
"""

from __future__ import annotations

import math
from typing import Any

from modiva.core.store import clock
from modiva.domains.tracker.domain_logic.constants import DEFAULT_TOKEN_TTL_MS


def get_initial_state() -> dict[str, Any]:
    return {
        "is_logged_in": False,
        "token": None,
        "refresh_token": None,
        "token_expiry": None,
        "session_id": None,
        "last_login": None,
        "remember_me": False,
    }


def _mapping(payload: Any) -> dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


def _ttl(payload: dict[str, Any]) -> int:
    expires_in = payload.get("expires_in")
    if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
        return DEFAULT_TOKEN_TTL_MS
    if not math.isfinite(expires_in):
        return DEFAULT_TOKEN_TTL_MS
    return int(expires_in)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def login(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    data = _mapping(payload)
    token = data.get("token") or None
    if token is None:
        # No token, no session: keep the previous session stamps.
        return {
            **state,
            "is_logged_in": False,
            "token": None,
            "refresh_token": None,
            "token_expiry": None,
        }

    now = clock.now_ms()
    return {
        **state,
        "is_logged_in": True,
        "token": token,
        "refresh_token": data.get("refresh_token") or None,
        "token_expiry": now + _ttl(data),
        "session_id": f"session_{now}",
        "last_login": now,
        "remember_me": bool(data.get("remember_me", state.get("remember_me", False))),
    }


def logout(state: dict[str, Any]) -> dict[str, Any]:
    return get_initial_state()


def set_token(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    data = _mapping(payload)
    token = data.get("token") or None
    return {
        **state,
        "token": token,
        "token_expiry": clock.now_ms() + _ttl(data) if token is not None else None,
        "is_logged_in": state.get("is_logged_in", False) and token is not None,
    }


def refresh_token(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    """Swap in a new access token, keeping the old refresh token if none is given."""
    data = _mapping(payload)
    token = data.get("token") or None
    return {
        **state,
        "token": token,
        "refresh_token": data.get("refresh_token") or state.get("refresh_token"),
        "token_expiry": clock.now_ms() + _ttl(data) if token is not None else None,
        "is_logged_in": state.get("is_logged_in", False) and token is not None,
    }


def update_session(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    data = _mapping(payload)
    updated = dict(state)
    if "session_id" in data:
        updated["session_id"] = data["session_id"]
    if "remember_me" in data:
        updated["remember_me"] = bool(data["remember_me"])
    return updated


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def is_authenticated(state: dict[str, Any]) -> bool:
    expiry = state.get("token_expiry")
    return bool(
        state.get("is_logged_in")
        and state.get("token") is not None
        and expiry is not None
        and clock.now_ms() < expiry
    )


def is_token_expired(state: dict[str, Any]) -> bool:
    expiry = state.get("token_expiry")
    if not expiry:
        return True
    return clock.now_ms() >= expiry


def get_time_until_expiry(state: dict[str, Any]) -> int:
    """Milliseconds until the token expires, 0 when expired or absent."""
    expiry = state.get("token_expiry")
    if not expiry:
        return 0
    return max(0, expiry - clock.now_ms())
