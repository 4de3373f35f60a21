"""
Attendance repository.

Persistence for one attendance record per (user, calendar day):
- Lookup by key, insert, conditional check-out update
- Monthly listings joined with the user directory
- Monthly and same-day aggregates

Rows are returned as typed AttendanceRecord / AttendanceListItem objects.
"""

import logging
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select, update, func, case, and_
from sqlalchemy.exc import IntegrityError

from ..connection import Database, get_database
from ..models import AttendanceRecordDB, UserDB, DepartmentDB, ATTENDANCE_DAY_CONSTRAINT
from ..exceptions import DatabaseConstraintError, DatabaseOperationError, EntityNotFoundError
from ...models.attendance import (
    AttendanceStatus,
    AttendanceRecord,
    AttendanceListItem,
    MonthlyAggregate,
    TodayAggregate,
)
from ...utils.datetime_utils import parse_month, to_naive_utc

logger = logging.getLogger(__name__)


def to_record(row: AttendanceRecordDB) -> AttendanceRecord:
    """Convert an ORM row into the typed domain record."""
    return AttendanceRecord(
        id=row.id,
        user_id=row.user_id,
        date=row.work_date,
        clock_in=row.clock_in,
        clock_out=row.clock_out,
        work_hours=Decimal(str(row.work_hours)) if row.work_hours is not None else None,
        status=row.status,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _count_when(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class AttendanceRepository:
    """Repository for attendance records."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_database()

    def _listing_query(self, start: date, end: date):
        return (
            select(AttendanceRecordDB, UserDB.name, DepartmentDB.name)
            .join(UserDB, AttendanceRecordDB.user_id == UserDB.id)
            .outerjoin(DepartmentDB, UserDB.department_id == DepartmentDB.id)
            .where(
                and_(
                    AttendanceRecordDB.work_date >= start,
                    AttendanceRecordDB.work_date < end,
                )
            )
        )

    async def find_by_user_and_date(
        self,
        user_id: int,
        work_date: date,
    ) -> Optional[AttendanceRecord]:
        """Get the record for (user, day), if any."""
        async with self.db.session() as session:
            try:
                result = await session.execute(
                    select(AttendanceRecordDB)
                    .where(
                        and_(
                            AttendanceRecordDB.user_id == user_id,
                            AttendanceRecordDB.work_date == work_date,
                        )
                    )
                    .limit(1)
                )
                row = result.scalar_one_or_none()
                return to_record(row) if row else None
            except Exception as e:
                logger.error(f"Error fetching attendance for user {user_id} on {work_date}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to fetch attendance for user {user_id}") from e

    async def insert(
        self,
        user_id: int,
        work_date: date,
        clock_in: datetime,
        status: AttendanceStatus = AttendanceStatus.PRESENT,
    ) -> AttendanceRecord:
        """
        Create the record for (user, day).

        Raises:
            DatabaseConstraintError: a record already exists for the key
            DatabaseOperationError: any other failure, including other integrity violations
        """
        async with self.db.session() as session:
            try:
                row = AttendanceRecordDB(
                    user_id=user_id,
                    work_date=work_date,
                    clock_in=to_naive_utc(clock_in),
                    clock_out=None,
                    work_hours=None,
                    status=AttendanceStatus(status).value,
                )
                session.add(row)
                await session.flush()
                await session.refresh(row)

                logger.info(f"Recorded check-in: user {user_id} on {work_date}")
                return to_record(row)

            except IntegrityError as e:
                if ATTENDANCE_DAY_CONSTRAINT in str(e.orig):
                    logger.warning(f"Duplicate attendance record for user {user_id} on {work_date}: {e}")
                    raise DatabaseConstraintError(
                        f"Attendance record already exists for user {user_id} on {work_date}"
                    ) from e
                logger.error(f"Integrity error recording check-in for user {user_id}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to record check-in for user {user_id}") from e
            except Exception as e:
                logger.error(f"Error recording check-in: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to record check-in for user {user_id}") from e

    async def update_clock_out(
        self,
        record_id: int,
        clock_out: datetime,
        work_hours: Decimal,
    ) -> None:
        """
        Set clock_out and work_hours, only if the record is not checked out yet.

        Raises:
            EntityNotFoundError: the record does not exist
            DatabaseConstraintError: the record was already checked out
        """
        async with self.db.session() as session:
            try:
                result = await session.execute(
                    update(AttendanceRecordDB)
                    .where(
                        and_(
                            AttendanceRecordDB.id == record_id,
                            AttendanceRecordDB.clock_out.is_(None),
                        )
                    )
                    .values(
                        clock_out=to_naive_utc(clock_out),
                        work_hours=work_hours,
                        updated_at=func.now(),
                    )
                    .execution_options(synchronize_session=False)
                )

                if result.rowcount == 0:
                    existing = await session.execute(
                        select(AttendanceRecordDB.id).where(AttendanceRecordDB.id == record_id)
                    )
                    if existing.scalar_one_or_none() is None:
                        raise EntityNotFoundError(f"Attendance record {record_id} not found")
                    raise DatabaseConstraintError(f"Attendance record {record_id} already checked out")

                logger.info(f"Recorded check-out: record {record_id} ({work_hours}h)")

            except (EntityNotFoundError, DatabaseConstraintError):
                raise
            except Exception as e:
                logger.error(f"Error recording check-out for record {record_id}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to record check-out for record {record_id}") from e

    async def list_by_user_and_month(
        self,
        user_id: int,
        month: str,
    ) -> List[AttendanceListItem]:
        """A user's records for YYYY-MM, newest day first."""
        start, end = parse_month(month)
        async with self.db.session() as session:
            try:
                result = await session.execute(
                    self._listing_query(start, end)
                    .where(AttendanceRecordDB.user_id == user_id)
                    .order_by(AttendanceRecordDB.work_date.desc())
                )
                return [
                    AttendanceListItem(record=to_record(row), user_name=user_name, department=department)
                    for row, user_name, department in result.all()
                ]
            except Exception as e:
                logger.error(f"Error listing attendance for user {user_id} in {month}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to list attendance for user {user_id}") from e

    async def list_by_month(
        self,
        month: str,
        status: Optional[AttendanceStatus] = None,
    ) -> List[AttendanceListItem]:
        """Everyone's records for YYYY-MM, newest day first, then by user name."""
        start, end = parse_month(month)
        async with self.db.session() as session:
            try:
                query = self._listing_query(start, end)
                if status is not None:
                    query = query.where(AttendanceRecordDB.status == AttendanceStatus(status).value)

                result = await session.execute(
                    query.order_by(AttendanceRecordDB.work_date.desc(), UserDB.name.asc())
                )
                return [
                    AttendanceListItem(record=to_record(row), user_name=user_name, department=department)
                    for row, user_name, department in result.all()
                ]
            except Exception as e:
                logger.error(f"Error listing attendance for {month}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to list attendance for {month}") from e

    async def aggregate_by_user_and_month(
        self,
        user_id: int,
        month: str,
    ) -> MonthlyAggregate:
        """
        Monthly summary for one user.

        Only checked-out rows count toward work days and the average;
        late/absent tallies cover every row of the month.
        """
        start, end = parse_month(month)
        async with self.db.session() as session:
            try:
                result = await session.execute(
                    select(
                        _count_when(AttendanceRecordDB.clock_out.isnot(None)),
                        func.avg(AttendanceRecordDB.work_hours),
                        _count_when(AttendanceRecordDB.status == AttendanceStatus.LATE.value),
                        _count_when(AttendanceRecordDB.status == AttendanceStatus.ABSENT.value),
                    ).where(
                        and_(
                            AttendanceRecordDB.user_id == user_id,
                            AttendanceRecordDB.work_date >= start,
                            AttendanceRecordDB.work_date < end,
                        )
                    )
                )
                work_days, avg_hours, late_count, absent_count = result.one()

                avg = Decimal("0")
                if avg_hours is not None:
                    avg = Decimal(str(avg_hours)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

                return MonthlyAggregate(
                    work_days=int(work_days or 0),
                    avg_work_hours=avg,
                    late_count=int(late_count or 0),
                    absent_count=int(absent_count or 0),
                )
            except Exception as e:
                logger.error(f"Error aggregating attendance for user {user_id} in {month}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to aggregate attendance for user {user_id}") from e

    async def aggregate_today(self, work_date: date) -> TodayAggregate:
        """Same-day snapshot over active users: clocked in, late, absent."""
        async with self.db.session() as session:
            try:
                result = await session.execute(
                    select(
                        _count_when(AttendanceRecordDB.clock_in.isnot(None)),
                        _count_when(AttendanceRecordDB.status == AttendanceStatus.LATE.value),
                        _count_when(AttendanceRecordDB.status == AttendanceStatus.ABSENT.value),
                    )
                    .select_from(AttendanceRecordDB)
                    .join(UserDB, AttendanceRecordDB.user_id == UserDB.id)
                    .where(
                        and_(
                            AttendanceRecordDB.work_date == work_date,
                            UserDB.is_active.is_(True),
                        )
                    )
                )
                present_count, late_count, absent_count = result.one()
                return TodayAggregate(
                    present_count=int(present_count or 0),
                    late_count=int(late_count or 0),
                    absent_count=int(absent_count or 0),
                )
            except Exception as e:
                logger.error(f"Error aggregating attendance for {work_date}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to aggregate attendance for {work_date}") from e


# Singleton
_attendance_repository: Optional[AttendanceRepository] = None


def get_attendance_repository() -> AttendanceRepository:
    """Get the attendance repository singleton."""
    global _attendance_repository
    if _attendance_repository is None:
        _attendance_repository = AttendanceRepository()
    return _attendance_repository
