"""Hemoglobin classification and trend calculations.

Pure functions over HB readings in g/dL. Both the user state slice and the
tool surface use these, so a reading is classified the same way everywhere.
"""

from __future__ import annotations

import statistics
from typing import Any

from modiva.domains.tracker.domain_logic.constants import (
    ANEMIC_STATUSES,
    HB_DEFAULT_GENDER,
    HB_MAX_VALUE,
    HB_MIN_VALUE,
    HB_MODERATE_ANEMIA,
    HB_NORMAL_RANGE,
    HB_SEVERE_ANEMIA,
    HB_TREND_DEADBAND,
    HBStatus,
    HBTrend,
)


def normal_range(gender: str | None) -> tuple[float, float]:
    """Return the (min, max) normal HB range for a gender code ('M' / 'F')."""
    return HB_NORMAL_RANGE.get(gender or HB_DEFAULT_GENDER, HB_NORMAL_RANGE[HB_DEFAULT_GENDER])


def classify_status(value: float | None, gender: str | None = None) -> HBStatus:
    """Classify an HB reading.

    Severe and moderate anemia use fixed thresholds; "mild" is anything else
    below the gender's normal minimum. Unknown genders use the female range.
    """
    if value is None:
        return "unknown"
    normal_min, normal_max = normal_range(gender)
    if value < HB_SEVERE_ANEMIA:
        return "severe"
    if value < HB_MODERATE_ANEMIA:
        return "moderate"
    if value < normal_min:
        return "mild"
    if value <= normal_max:
        return "normal"
    return "high"


def is_anemic(value: float | None, gender: str | None = None) -> bool:
    return classify_status(value, gender) in ANEMIC_STATUSES


def is_plausible(value: Any) -> bool:
    """Whether ``value`` is a number inside the measurable HB range."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return HB_MIN_VALUE <= value <= HB_MAX_VALUE


def trend_between(current: float | None, previous: float | None) -> HBTrend:
    """Trend from ``previous`` to ``current`` with a +/-0.2 g/dL deadband."""
    if current is None or previous is None:
        return "stable"
    try:
        difference = current - previous
    except TypeError:
        return "stable"
    if difference > HB_TREND_DEADBAND:
        return "up"
    if difference < -HB_TREND_DEADBAND:
        return "down"
    return "stable"


def compare(current: float | None, previous: float | None) -> dict[str, Any]:
    """Compare two readings.

    Returns:
        Dict with ``trend``, ``difference`` (g/dL, 1 decimal) and
        ``percentage`` change relative to ``previous`` (1 decimal).
    """
    if current is None or previous is None:
        return {"trend": "stable", "difference": 0.0, "percentage": 0.0}

    difference = current - previous
    percentage = (difference / previous) * 100 if previous else 0.0
    return {
        "trend": trend_between(current, previous),
        "difference": round(difference, 1),
        "percentage": round(percentage, 1),
    }


def average(values: list[float | None]) -> float | None:
    """Mean of the non-null readings, rounded to 1 decimal."""
    readings = [v for v in values if v is not None]
    if not readings:
        return None
    return round(statistics.mean(readings), 1)


def trend_direction(values: list[float | None]) -> HBTrend:
    """Overall direction of a chronological series (oldest first)."""
    readings = [v for v in values if v is not None]
    if len(readings) < 2:
        return "stable"
    return trend_between(readings[-1], readings[0])


def summarize(history: list[dict[str, Any]], gender: str | None = None) -> dict[str, Any]:
    """Summary of an HB history list of ``{value, date}`` entries (oldest first)."""
    values = [entry.get("value") for entry in history if isinstance(entry, dict)]
    readings = [v for v in values if v is not None]
    latest = readings[-1] if readings else None
    return {
        "latest": latest,
        "status": classify_status(latest, gender),
        "average": average(readings),
        "min": min(readings) if readings else None,
        "max": max(readings) if readings else None,
        "direction": trend_direction(readings),
        "data_points": len(readings),
    }
