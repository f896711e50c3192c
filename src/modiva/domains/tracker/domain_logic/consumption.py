"""Vitamin consumption schedule helpers."""

from __future__ import annotations

from modiva.domains.tracker.domain_logic.constants import VITAMIN_MINIMUM_INTERVAL_DAYS

_DAY_MS = 24 * 60 * 60 * 1000


def percentage(count: int, target: int) -> int:
    """Completion percentage, rounded half up. Non-positive targets give 0."""
    if not target or target <= 0:
        return 0
    # int(x + 0.5) rounds .5 up for non-negative values.
    return int(count / target * 100 + 0.5) if count >= 0 else round(count / target * 100)


def remaining(count: int, target: int) -> int:
    return max(0, target - count)


def is_target_reached(count: int, target: int) -> bool:
    return target > 0 and count >= target


def next_allowed_at(last_consumed: int | None) -> int | None:
    """Earliest epoch-ms time the next tablet is due, or None if never taken."""
    if last_consumed is None:
        return None
    return last_consumed + VITAMIN_MINIMUM_INTERVAL_DAYS * _DAY_MS
