"""
Work-hours arithmetic.

Durations are computed from whole milliseconds and rounded half-up to two
decimals so the stored value is identical whichever entry point (web or
Slack) performed the check-out.
"""

from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple, Union

from .datetime_utils import to_aware_utc
from ..services.exceptions import InvalidIntervalError

MILLIS_PER_HOUR = Decimal(3_600_000)
HUNDREDTHS = Decimal("0.01")
EMPTY_PLACEHOLDER = "-"


def compute_work_hours(clock_in: datetime, clock_out: datetime) -> Decimal:
    """
    Hours between clock_in and clock_out, rounded half-up to 2 decimals.

    Naive datetimes are read as UTC.

    Raises:
        InvalidIntervalError: if clock_out is not strictly after clock_in
    """
    elapsed = to_aware_utc(clock_out) - to_aware_utc(clock_in)
    if elapsed <= timedelta(0):
        raise InvalidIntervalError(
            f"Check-out {clock_out.isoformat()} is not after check-in {clock_in.isoformat()}"
        )

    millis = elapsed // timedelta(milliseconds=1)
    return (Decimal(millis) / MILLIS_PER_HOUR).quantize(HUNDREDTHS, rounding=ROUND_HALF_UP)


def split_hours(hours: Union[Decimal, float, int]) -> Tuple[int, int]:
    """
    Decompose decimal hours into (whole hours, rounded minutes).

    A fraction that rounds up to 60 minutes carries into the hour.
    """
    value = Decimal(str(hours))
    whole = int(value // 1)
    minutes = int(((value % 1) * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return whole, minutes


def format_hours(hours: Optional[Union[Decimal, float, int]]) -> str:
    """Render decimal hours as 'Xh Ym'; a dash when absent."""
    if hours is None:
        return EMPTY_PLACEHOLDER
    whole, minutes = split_hours(hours)
    return f"{whole}h {minutes}m"
