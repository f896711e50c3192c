"""Tracker domain constants shared by the state modules and domain logic."""

from __future__ import annotations

from typing import Literal

# ---------------------------------------------------------------------------
# Vitamin consumption (iron supplement schedule)
# ---------------------------------------------------------------------------

VITAMIN_TARGET_6_MONTHS = 48
VITAMIN_TARGET_PER_MONTH = 8
VITAMIN_TARGET_PER_WEEK = 2
VITAMIN_MINIMUM_INTERVAL_DAYS = 3

# ---------------------------------------------------------------------------
# Hemoglobin (g/dL)
# ---------------------------------------------------------------------------

HB_NORMAL_RANGE = {
    "F": (12.0, 16.0),
    "M": (13.0, 17.0),
}
HB_DEFAULT_GENDER = "F"

HB_SEVERE_ANEMIA = 7.0
HB_MODERATE_ANEMIA = 10.0

HB_MIN_VALUE = 0.0
HB_MAX_VALUE = 25.0

# Changes within +/- this band count as "stable".
HB_TREND_DEADBAND = 0.2

HB_HISTORY_LIMIT = 10

HBStatus = Literal["severe", "moderate", "mild", "normal", "high", "unknown"]
HBTrend = Literal["up", "down", "stable"]

ANEMIC_STATUSES = frozenset({"severe", "moderate", "mild"})

# ---------------------------------------------------------------------------
# Reports and notifications
# ---------------------------------------------------------------------------

REPORT_STATUSES = ("draft", "pending", "submitted", "verified", "rejected", "completed")
REPORT_DEFAULT_STATUS = "pending"

NOTIFICATION_TYPES = (
    "reminder",
    "success",
    "motivation",
    "info",
    "warning",
    "error",
    "achievement",
    "system",
)

# ---------------------------------------------------------------------------
# Auth and UI
# ---------------------------------------------------------------------------

DEFAULT_TOKEN_TTL_MS = 24 * 60 * 60 * 1000

NAVIGATION_HISTORY_LIMIT = 20
DEFAULT_TOAST_DURATION_MS = 3000
DEFAULT_OVERLAY_OPACITY = 0.5
