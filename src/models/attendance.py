"""
Typed attendance domain objects.

Rows leave the store as these frozen dataclasses; services and adapters never
handle ORM instances or loosely-typed dicts from the database.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional


class AttendanceStatus(str, Enum):
    """Closed set of attendance states."""
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    LEAVE = "leave"
    REMOTE = "remote"

    @classmethod
    def parse(cls, value: str) -> "AttendanceStatus":
        """Parse a status string, raising ValueError for unknown values."""
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            raise ValueError(f"Unknown attendance status '{value}'")


# Display labels per locale
STATUS_LABELS: Dict[str, Dict[AttendanceStatus, str]] = {
    "en": {
        AttendanceStatus.PRESENT: "Present",
        AttendanceStatus.ABSENT: "Absent",
        AttendanceStatus.LATE: "Late",
        AttendanceStatus.HALF_DAY: "Half day",
        AttendanceStatus.LEAVE: "Leave",
        AttendanceStatus.REMOTE: "Remote",
    },
    "ko": {
        AttendanceStatus.PRESENT: "출근",
        AttendanceStatus.ABSENT: "결근",
        AttendanceStatus.LATE: "지각",
        AttendanceStatus.HALF_DAY: "반차",
        AttendanceStatus.LEAVE: "휴가",
        AttendanceStatus.REMOTE: "재택",
    },
}

UNKNOWN_STATUS_LABELS = {"en": "Unknown", "ko": "알 수 없음"}
UNASSIGNED_DEPARTMENT = {"en": "Unassigned", "ko": "미배정"}
DEFAULT_LOCALE = "en"


def status_label(status: str, locale: str = DEFAULT_LOCALE) -> str:
    """Localized label for a status; unknown statuses get a fixed fallback."""
    labels = STATUS_LABELS.get(locale, STATUS_LABELS[DEFAULT_LOCALE])
    try:
        return labels[AttendanceStatus(status)]
    except ValueError:
        return UNKNOWN_STATUS_LABELS.get(locale, UNKNOWN_STATUS_LABELS[DEFAULT_LOCALE])


def unassigned_department(locale: str = DEFAULT_LOCALE) -> str:
    return UNASSIGNED_DEPARTMENT.get(locale, UNASSIGNED_DEPARTMENT[DEFAULT_LOCALE])


@dataclass(frozen=True)
class AttendanceRecord:
    """One user's attendance for one calendar day. Instants are naive UTC."""
    id: int
    user_id: int
    date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    work_hours: Optional[Decimal] = None
    status: str = AttendanceStatus.PRESENT.value
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_working(self) -> bool:
        return self.clock_in is not None and self.clock_out is None


@dataclass(frozen=True)
class AttendanceListItem:
    """A record joined with its owner's directory entry."""
    record: AttendanceRecord
    user_name: str
    department: Optional[str] = None


@dataclass(frozen=True)
class MonthlyAggregate:
    work_days: int = 0
    avg_work_hours: Decimal = Decimal("0")
    late_count: int = 0
    absent_count: int = 0


@dataclass(frozen=True)
class TodayAggregate:
    present_count: int = 0
    late_count: int = 0
    absent_count: int = 0


@dataclass(frozen=True)
class UserIdentity:
    """Directory entry as seen by the attendance core."""
    id: int
    name: str
    email: str
    role: str
    is_active: bool = True
    department: Optional[str] = None
    slack_user_id: Optional[str] = None
