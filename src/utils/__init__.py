"""Utility modules for the TeamCollab backend."""

from .datetime_utils import (
    Clock,
    FixedClock,
    get_clock,
    get_local_tz,
    to_aware_utc,
    to_naive_utc,
    local_instant,
    parse_month,
    parse_day,
    find_day,
)

from .work_hours import (
    compute_work_hours,
    split_hours,
    format_hours,
)

__all__ = [
    "Clock",
    "FixedClock",
    "get_clock",
    "get_local_tz",
    "to_aware_utc",
    "to_naive_utc",
    "local_instant",
    "parse_month",
    "parse_day",
    "find_day",
    "compute_work_hours",
    "split_hours",
    "format_hours",
]
