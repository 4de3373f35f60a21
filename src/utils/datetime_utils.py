"""
Centralized clock, calendar and timezone utilities.

Every attendance operation asks a Clock for "now" and "today" so that all
components agree on day boundaries. Instants are handled as aware UTC
datetimes in memory and stored as naive UTC; calendar days and HH:MM
renderings are derived in the single configured deployment timezone.
"""

import re
from datetime import datetime, date, timedelta
from typing import Optional, Tuple, Union
import pytz

from config import settings

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
DAY_PATTERN = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")


def get_local_tz(timezone: Optional[str] = None) -> pytz.BaseTzInfo:
    """Get the configured deployment timezone."""
    return pytz.timezone(timezone or settings.timezone)


def to_aware_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Convert a datetime to timezone-aware UTC.

    Naive datetimes are storage values and are read as UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Convert any datetime to naive UTC for database storage.

    TIMESTAMP WITHOUT TIME ZONE columns expect naive datetimes.
    """
    if dt is None:
        return None

    return to_aware_utc(dt).replace(tzinfo=None)


class Clock:
    """
    Current instant and business day in a fixed timezone.

    Substitute a FixedClock in tests to pin "now".
    """

    def __init__(self, timezone: Optional[str] = None):
        self.tz = get_local_tz(timezone)

    def now(self) -> datetime:
        """Current instant, aware UTC."""
        return datetime.now(pytz.UTC)

    def to_local(self, dt: datetime) -> datetime:
        """Convert an instant (aware, or naive UTC) to the deployment timezone."""
        return to_aware_utc(dt).astimezone(self.tz)

    def today_date(self) -> date:
        """Business day of the current instant."""
        return self.to_local(self.now()).date()

    def today(self) -> str:
        """Business day as YYYY-MM-DD."""
        return self.today_date().isoformat()

    def current_month(self) -> str:
        """Business month as YYYY-MM."""
        return self.today()[:7]

    def format_time(self, dt: Optional[datetime]) -> Optional[str]:
        """Render an instant as HH:MM (24h) in the deployment timezone."""
        if dt is None:
            return None
        return self.to_local(dt).strftime("%H:%M")


class FixedClock(Clock):
    """Clock pinned to a given instant. Used by tests and replays."""

    def __init__(self, instant: datetime, timezone: Optional[str] = None):
        super().__init__(timezone)
        self.instant = to_aware_utc(instant)

    def now(self) -> datetime:
        return self.instant

    def set(self, instant: datetime) -> None:
        self.instant = to_aware_utc(instant)

    def advance(self, **kwargs) -> datetime:
        """Move the pinned instant forward by timedelta(**kwargs)."""
        self.instant = self.instant + timedelta(**kwargs)
        return self.instant


def local_instant(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    timezone: Optional[str] = None,
) -> datetime:
    """Build an aware UTC instant from a wall-clock time in the deployment timezone."""
    tz = get_local_tz(timezone)
    local_dt = tz.localize(datetime(year, month, day, hour, minute, second))
    return local_dt.astimezone(pytz.UTC)


def parse_month(month: str) -> Tuple[date, date]:
    """
    Parse a YYYY-MM month into its half-open [first day, next month first day) range.

    Raises:
        ValueError: if the month is malformed or out of range
    """
    match = MONTH_PATTERN.match((month or "").strip())
    if not match:
        raise ValueError(f"Invalid month '{month}', expected YYYY-MM")

    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12:
        raise ValueError(f"Invalid month '{month}', expected YYYY-MM")

    start = date(year, month_number, 1)
    if month_number == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month_number + 1, 1)
    return start, end


def parse_day(value: Union[str, date]) -> date:
    """
    Parse a YYYY-MM-DD calendar day.

    Raises:
        ValueError: if the value is not a valid calendar day
    """
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def find_day(text: Optional[str]) -> Optional[str]:
    """Find the first literal YYYY-MM-DD token in free text."""
    if not text:
        return None
    match = DAY_PATTERN.search(text)
    return match.group(1) if match else None


# Singleton
_clock: Optional[Clock] = None


def get_clock() -> Clock:
    """Get the process clock (deployment timezone)."""
    global _clock
    if _clock is None:
        _clock = Clock()
    return _clock
