"""Report slice — submitted consumption reports, filters, pagination.

``statistics`` and the pagination totals are derived from ``list`` after
every transition that changes the list, so they cannot drift from it.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from modiva.core.store import clock
from modiva.domains.tracker.domain_logic.constants import REPORT_DEFAULT_STATUS

_COMPLETED_STATUSES = frozenset({"completed", "verified"})
_DEFAULT_LIMIT = 10


def get_initial_state() -> dict[str, Any]:
    return {
        "list": [],
        "current_report": None,
        "filters": {
            "status": "all",
            "date_from": None,
            "date_to": None,
            "sort_by": "date",
            "sort_order": "desc",
        },
        "pagination": {
            "page": 1,
            "limit": _DEFAULT_LIMIT,
            "total": 0,
            "total_pages": 0,
        },
        "statistics": {
            "total": 0,
            "pending": 0,
            "completed": 0,
            "rejected": 0,
        },
        "loading": False,
        "error": None,
    }


def compute_statistics(reports: list[dict[str, Any]]) -> dict[str, int]:
    """Counts by status for a report list."""
    statuses = [r.get("status") for r in reports if isinstance(r, dict)]
    return {
        "total": len(reports),
        "pending": sum(1 for s in statuses if s == "pending"),
        "completed": sum(1 for s in statuses if s in _COMPLETED_STATUSES),
        "rejected": sum(1 for s in statuses if s == "rejected"),
    }


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


def _with_list(state: dict[str, Any], reports: list[dict[str, Any]], **extra: Any) -> dict[str, Any]:
    limit = _positive_int(state["pagination"].get("limit"), _DEFAULT_LIMIT)
    return {
        **state,
        **extra,
        "list": reports,
        "statistics": compute_statistics(reports),
        "pagination": {
            **state["pagination"],
            "total": len(reports),
            "total_pages": math.ceil(len(reports) / limit),
        },
    }


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def set_reports(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    reports = [r for r in payload if isinstance(r, dict)] if isinstance(payload, list) else []
    return _with_list(state, reports, loading=False, error=None)


def add_report(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    """Prepend a report. Reports without a status start as ``pending``."""
    if not isinstance(payload, dict):
        return state
    report = {"status": REPORT_DEFAULT_STATUS, **payload}
    return _with_list(state, [report, *state["list"]])


def update_report(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    data = payload if isinstance(payload, dict) else {}
    report_id = data.get("id")
    updates = data.get("updates") if isinstance(data.get("updates"), dict) else {}
    if report_id is None:
        return state

    now = clock.now_ms()
    reports = [
        {**r, **updates, "updated_at": now} if r.get("id") == report_id else r
        for r in state["list"]
    ]
    current = state["current_report"]
    if isinstance(current, dict) and current.get("id") == report_id:
        current = {**current, **updates, "updated_at": now}
    return _with_list(state, reports, current_report=current)


def delete_report(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    reports = [r for r in state["list"] if r.get("id") != payload]
    current = state["current_report"]
    if isinstance(current, dict) and current.get("id") == payload:
        current = None
    return _with_list(state, reports, current_report=current)


def set_current_report(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "current_report": payload}


def set_filter(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    updates = payload if isinstance(payload, dict) else {}
    return {**state, "filters": {**state["filters"], **updates}}


def set_pagination(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    updates = payload if isinstance(payload, dict) else {}
    return _with_list({**state, "pagination": {**state["pagination"], **updates}}, state["list"])


def set_loading(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "loading": bool(payload)}


def set_error(state: dict[str, Any], payload: Any) -> dict[str, Any]:
    return {**state, "error": payload, "loading": False}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def parse_date(value: Any) -> datetime | None:
    """Parse an ISO 8601 string or epoch-ms number into an aware UTC datetime."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def _sort_key(field: str):
    def key(report: dict[str, Any]) -> tuple:
        value = report.get(field)
        if field == "date" or field.endswith("_at"):
            parsed = parse_date(value)
            if parsed is not None:
                return (0, parsed.timestamp())
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return (0, float(value))
        if isinstance(value, str):
            return (1, value)
        return (2, "" if value is None else str(value))

    return key


def get_filtered_reports(state: dict[str, Any]) -> list[dict[str, Any]]:
    """Reports matching the slice's filters, sorted by ``sort_by`` / ``sort_order``.

    Date bounds are inclusive. Reports whose date cannot be parsed are
    dropped whenever a bound is set.
    """
    filters = state["filters"]
    filtered = list(state["list"])

    status = filters.get("status", "all")
    if status != "all":
        filtered = [r for r in filtered if r.get("status") == status]

    date_from = parse_date(filters.get("date_from"))
    if filters.get("date_from") is not None:
        filtered = [
            r for r in filtered
            if date_from is not None
            and (d := parse_date(r.get("date"))) is not None
            and d >= date_from
        ]
    date_to = parse_date(filters.get("date_to"))
    if filters.get("date_to") is not None:
        filtered = [
            r for r in filtered
            if date_to is not None
            and (d := parse_date(r.get("date"))) is not None
            and d <= date_to
        ]

    sort_by = filters.get("sort_by")
    filtered.sort(
        key=_sort_key(sort_by if isinstance(sort_by, str) and sort_by else "date"),
        reverse=filters.get("sort_order") != "asc",
    )
    return filtered


def get_paginated_reports(state: dict[str, Any]) -> list[dict[str, Any]]:
    pagination = state["pagination"]
    page = _positive_int(pagination.get("page"), 1)
    limit = _positive_int(pagination.get("limit"), _DEFAULT_LIMIT)
    start = (page - 1) * limit
    return get_filtered_reports(state)[start:start + limit]
