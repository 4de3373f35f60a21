"""
Attendance service.

Owns the per-user, per-day check-in/check-out lifecycle:

    NotStarted --check_in--> Working --check_out--> Completed

and the read-only reporting built on the same records (today's status,
monthly listings and aggregates). The store, the user directory and the
clock are passed in; nothing here reaches for a global connection.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Dict, Any, List, Union

from config import settings
from ..database.exceptions import DatabaseError, DatabaseConstraintError, EntityNotFoundError
from ..database.repositories.attendance import AttendanceRepository, get_attendance_repository
from ..database.repositories.users import UserRepository, get_user_repository
from ..models.attendance import (
    AttendanceStatus,
    AttendanceRecord,
    AttendanceListItem,
    status_label,
    unassigned_department,
)
from ..monitoring.prometheus import record_attendance_event
from ..utils.datetime_utils import Clock, get_clock, parse_month, parse_day
from ..utils.work_hours import compute_work_hours, format_hours, EMPTY_PLACEHOLDER
from .exceptions import (
    ValidationError,
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    NoCheckInError,
    NotFoundError,
    PersistenceError,
    InvalidIntervalError,
)

logger = logging.getLogger(__name__)


class AttendanceService:
    """Service for attendance operations."""

    def __init__(
        self,
        attendance_repo: AttendanceRepository,
        user_repo: UserRepository,
        clock: Clock,
        locale: Optional[str] = None,
    ):
        self.attendance = attendance_repo
        self.users = user_repo
        self.clock = clock
        self.locale = locale or settings.locale

    # ==================== HELPERS ====================

    async def _persist(self, operation: str, awaitable, user_id: Optional[int] = None, day: Any = None):
        """
        Await a store call, surfacing infrastructure failures as PersistenceError.

        Constraint and not-found errors pass through for the caller to map.
        """
        try:
            return await awaitable
        except (DatabaseConstraintError, EntityNotFoundError):
            raise
        except DatabaseError as e:
            logger.error(
                f"Attendance store failure: operation={operation} user={user_id} date={day}: {e}"
            )
            raise PersistenceError() from e

    def _resolve_month(self, month: Optional[str]) -> str:
        if not month:
            return self.clock.current_month()
        try:
            parse_month(month)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return month.strip()

    def _format_item(self, item: AttendanceListItem) -> Dict[str, Any]:
        record = item.record
        return {
            "id": str(record.id),
            "userId": str(record.user_id),
            "userName": item.user_name,
            "department": item.department or unassigned_department(self.locale),
            "date": record.date.isoformat(),
            "checkIn": self.clock.format_time(record.clock_in) or EMPTY_PLACEHOLDER,
            "checkOut": self.clock.format_time(record.clock_out) or EMPTY_PLACEHOLDER,
            "workHours": format_hours(record.work_hours) if record.clock_out else EMPTY_PLACEHOLDER,
            "status": status_label(record.status, self.locale),
        }

    def _live_hours(self, record: AttendanceRecord) -> Decimal:
        """Hours worked so far for a record that is still open."""
        now = self.clock.now()
        if now <= self.clock.to_local(record.clock_in):
            return Decimal("0.00")
        return compute_work_hours(record.clock_in, now)

    # ==================== STATE MACHINE ====================

    async def check_in(self, user_id: int) -> Dict[str, Any]:
        """
        Open today's record for the user.

        Returns:
            Dict with: checkIn (HH:MM), date (YYYY-MM-DD)

        Raises:
            AlreadyCheckedInError: a record for today already exists
        """
        day = self.clock.today_date()

        existing = await self._persist(
            "check_in", self.attendance.find_by_user_and_date(user_id, day), user_id, day
        )
        if existing:
            record_attendance_event("check_in", "already_checked_in")
            raise AlreadyCheckedInError()

        now = self.clock.now()
        try:
            await self._persist(
                "check_in",
                self.attendance.insert(user_id, day, now, AttendanceStatus.PRESENT),
                user_id,
                day,
            )
        except DatabaseConstraintError as e:
            # Lost a race with a concurrent check-in for the same day
            record_attendance_event("check_in", "already_checked_in")
            raise AlreadyCheckedInError() from e
        except PersistenceError:
            record_attendance_event("check_in", "persistence_error")
            raise

        record_attendance_event("check_in")
        logger.info(f"User {user_id} checked in on {day}")
        return {
            "checkIn": self.clock.format_time(now),
            "date": day.isoformat(),
        }

    async def check_out(self, user_id: int) -> Dict[str, Any]:
        """
        Close today's record for the user and store the worked hours.

        Returns:
            Dict with: checkOut (HH:MM), workHours ("Xh Ym"), hours ("9.50")

        Raises:
            NoCheckInError: no record for today
            AlreadyCheckedOutError: today's record is already closed
        """
        day = self.clock.today_date()

        record = await self._persist(
            "check_out", self.attendance.find_by_user_and_date(user_id, day), user_id, day
        )
        if record is None or record.clock_in is None:
            record_attendance_event("check_out", "no_check_in")
            raise NoCheckInError()
        if record.clock_out is not None:
            record_attendance_event("check_out", "already_checked_out")
            raise AlreadyCheckedOutError()

        now = self.clock.now()
        try:
            hours = compute_work_hours(record.clock_in, now)
        except InvalidIntervalError:
            logger.critical(
                f"Non-monotonic check-out for user {user_id} on {day}: "
                f"clock_in={record.clock_in} clock_out={now}"
            )
            record_attendance_event("check_out", "invalid_interval")
            raise

        try:
            await self._persist(
                "check_out", self.attendance.update_clock_out(record.id, now, hours), user_id, day
            )
        except DatabaseConstraintError as e:
            # A concurrent check-out closed the record first
            record_attendance_event("check_out", "already_checked_out")
            raise AlreadyCheckedOutError() from e
        except EntityNotFoundError as e:
            record_attendance_event("check_out", "not_found")
            raise NotFoundError(f"Attendance record {record.id} no longer exists") from e
        except PersistenceError:
            record_attendance_event("check_out", "persistence_error")
            raise

        record_attendance_event("check_out")
        logger.info(f"User {user_id} checked out on {day} after {hours}h")
        return {
            "checkOut": self.clock.format_time(now),
            "workHours": format_hours(hours),
            "hours": str(hours),
        }

    async def get_today_status(self, user_id: int) -> Dict[str, Any]:
        """
        Today's state for the user.

        While working, hours are computed live against now() and not stored.
        """
        day = self.clock.today_date()
        record = await self._persist(
            "today_status", self.attendance.find_by_user_and_date(user_id, day), user_id, day
        )

        if record is None or record.clock_in is None:
            return {
                "isWorking": False,
                "checkIn": None,
                "checkOut": None,
                "workHours": None,
            }

        if record.clock_out is None:
            hours = self._live_hours(record)
        else:
            hours = record.work_hours

        return {
            "isWorking": record.is_working,
            "checkIn": self.clock.format_time(record.clock_in),
            "checkOut": self.clock.format_time(record.clock_out),
            "workHours": format_hours(hours) if hours is not None else None,
        }

    async def get_day_report(self, user_id: int, day: Union[str, date, None] = None) -> Dict[str, Any]:
        """
        One user's record for a single day (defaults to today).

        Raises:
            ValidationError: the day is not a valid YYYY-MM-DD date
            NotFoundError: no record for that day
        """
        if day is None:
            target = self.clock.today_date()
        else:
            try:
                target = parse_day(day)
            except ValueError as e:
                raise ValidationError(f"Invalid date '{day}', expected YYYY-MM-DD") from e

        record = await self._persist(
            "day_report", self.attendance.find_by_user_and_date(user_id, target), user_id, target
        )
        if record is None:
            raise NotFoundError(f"No attendance record for {target.isoformat()}")

        return {
            "date": target.isoformat(),
            "checkIn": self.clock.format_time(record.clock_in) or EMPTY_PLACEHOLDER,
            "checkOut": self.clock.format_time(record.clock_out) or EMPTY_PLACEHOLDER,
            "workHours": format_hours(record.work_hours) if record.clock_out else EMPTY_PLACEHOLDER,
            "status": status_label(record.status, self.locale),
            "isWorking": record.is_working,
        }

    # ==================== REPORTING ====================

    async def list_mine(self, user_id: int, month: Optional[str] = None) -> List[Dict[str, Any]]:
        """The user's records for a month (default: current), newest first."""
        month = self._resolve_month(month)
        items = await self._persist(
            "list_mine", self.attendance.list_by_user_and_month(user_id, month), user_id, month
        )
        return [self._format_item(item) for item in items]

    async def list_mine_stats(self, user_id: int, month: Optional[str] = None) -> Dict[str, Any]:
        """Monthly aggregate for the user; zeroes when there are no rows."""
        month = self._resolve_month(month)
        stats = await self._persist(
            "list_mine_stats", self.attendance.aggregate_by_user_and_month(user_id, month), user_id, month
        )
        return {
            "workDays": stats.work_days,
            "avgWorkHours": format_hours(stats.avg_work_hours),
            "lateCount": stats.late_count,
            "absentCount": stats.absent_count,
        }

    async def list_all(
        self,
        month: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Everyone's records for a month, newest day first then by user name. Admin only."""
        month = self._resolve_month(month)

        status_filter = None
        if status:
            try:
                status_filter = AttendanceStatus.parse(status)
            except ValueError as e:
                raise ValidationError(str(e)) from e

        items = await self._persist("list_all", self.attendance.list_by_month(month, status_filter), None, month)
        return [self._format_item(item) for item in items]

    async def list_all_stats(self, month: Optional[str] = None) -> Dict[str, Any]:
        """
        Organisation snapshot. Admin only.

        The counts describe today, not the whole month; the month is
        validated and echoed back.
        """
        month = self._resolve_month(month)
        day = self.clock.today_date()

        total_users = await self._persist("list_all_stats", self.users.count_active(), None, day)
        today = await self._persist("list_all_stats", self.attendance.aggregate_today(day), None, day)

        return {
            "month": month,
            "date": day.isoformat(),
            "totalUsers": total_users,
            "present": min(today.present_count, total_users),
            "late": today.late_count,
            "absent": today.absent_count,
        }


# Singleton
_attendance_service: Optional[AttendanceService] = None


def get_attendance_service() -> AttendanceService:
    """Get the attendance service singleton."""
    global _attendance_service
    if _attendance_service is None:
        _attendance_service = AttendanceService(
            attendance_repo=get_attendance_repository(),
            user_repo=get_user_repository(),
            clock=get_clock(),
        )
    return _attendance_service
