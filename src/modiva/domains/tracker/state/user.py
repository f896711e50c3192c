"""User slice — profile, vitamin consumption, hemoglobin readings, preferences."""

from __future__ import annotations

from typing import Any

from modiva.core.store import clock
from modiva.domains.tracker.domain_logic import consumption, hemoglobin
from modiva.domains.tracker.domain_logic.constants import (
    HB_HISTORY_LIMIT,
    VITAMIN_TARGET_6_MONTHS,
    HBStatus,
    HBTrend,
)


def get_initial_state() -> dict[str, Any]:
    return {
        "profile": {
            "id": None,
            "name": None,
            "nisn": None,
            "email": None,
            "phone": None,
            "school": None,
            "school_id": None,
            "address": None,
            "birth_date": None,
            "gender": None,
            "height": None,
            "weight": None,
            "avatar": None,
            "role": None,
            "created_at": None,
            "updated_at": None,
        },
        "vitamin_consumption": {
            "count": 0,
            "target": VITAMIN_TARGET_6_MONTHS,
            "percentage": 0,
            "last_consumed": None,
        },
        "hemoglobin": {
            "current": None,
            "previous": None,
            "trend": "stable",
            "history": [],
            "last_measured": None,
        },
        "statistics": {
            "total_reports": 0,
            "completed_reports": 0,
            "pending_reports": 0,
            "average_hb": None,
            "consumption_rate": 0,
        },
        "preferences": {
            "notifications": True,
            "email_notifications": False,
            "reminder_time": "08:00",
            "language": "id",
            "theme": "light",
        },
        "loading": False,
        "error": None,
    }


def _mapping(payload: Any) -> dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def set_profile(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return update_profile(state, payload)


def update_profile(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {
        **state,
        "profile": {
            **state["profile"],
            **_mapping(payload),
            "updated_at": clock.now_ms(),
        },
    }


def set_preferences(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "preferences": {**state["preferences"], **_mapping(payload)}}


def increment_consumption(state: dict[str, Any], payload: Any = None) -> dict[str, Any]:
    current = state["vitamin_consumption"]
    new_count = current.get("count", 0) + 1
    return {
        **state,
        "vitamin_consumption": {
            **current,
            "count": new_count,
            "percentage": consumption.percentage(new_count, current.get("target", 0)),
            "last_consumed": clock.now_ms(),
        },
    }


def update_hb(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    """Record a new HB reading.

    The previous ``current`` becomes ``previous`` and the trend between the
    two uses the same deadband as ``hemoglobin.trend_between``. Payloads that
    are not a plausible reading leave the slice unchanged.
    """
    if not hemoglobin.is_plausible(payload):
        return state

    current = state["hemoglobin"]
    previous_value = current.get("current")
    now = clock.now_ms()
    history = [*current.get("history", []), {"value": payload, "date": now}]
    return {
        **state,
        "hemoglobin": {
            "current": payload,
            "previous": previous_value,
            "trend": hemoglobin.trend_between(payload, previous_value),
            "history": history[-HB_HISTORY_LIMIT:],
            "last_measured": now,
        },
    }


def update_statistics(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "statistics": {**state["statistics"], **_mapping(payload)}}


def set_loading(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "loading": bool(payload)}


def set_error(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "error": payload}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_consumption_percentage(state: dict[str, Any]) -> int:
    return state["vitamin_consumption"]["percentage"]


def get_hb_trend(state: dict[str, Any]) -> HBTrend:
    return state["hemoglobin"]["trend"]


def get_hb_status(state: dict[str, Any]) -> HBStatus:
    return hemoglobin.classify_status(
        state["hemoglobin"]["current"], state["profile"].get("gender")
    )
