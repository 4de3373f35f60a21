"""
Pytest configuration and shared fixtures.

The attendance service is exercised against in-memory stand-ins for the
repositories that honour the same contract (unique (user, day) key,
conditional check-out update) plus a pinned clock.
"""

import dataclasses
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

import pytest

from src.database.exceptions import DatabaseConstraintError, EntityNotFoundError
from src.models.attendance import (
    AttendanceStatus,
    AttendanceRecord,
    AttendanceListItem,
    MonthlyAggregate,
    TodayAggregate,
    UserIdentity,
)
from src.services.attendance import AttendanceService
from src.utils.datetime_utils import FixedClock, local_instant, parse_month, to_naive_utc

TZ = "Asia/Seoul"


class FakeAttendanceRepository:
    """In-memory attendance store keyed by (user_id, date)."""

    def __init__(self, users: Optional[Dict[int, UserIdentity]] = None):
        self.records: Dict[int, AttendanceRecord] = {}
        self.users = users or {}
        self._next_id = 1

    def add(self, user_id: int, day: date, clock_in: Optional[datetime] = None,
            clock_out: Optional[datetime] = None, work_hours: Optional[Decimal] = None,
            status: str = AttendanceStatus.PRESENT.value) -> AttendanceRecord:
        record = AttendanceRecord(
            id=self._next_id,
            user_id=user_id,
            date=day,
            clock_in=to_naive_utc(clock_in),
            clock_out=to_naive_utc(clock_out),
            work_hours=work_hours,
            status=status,
        )
        self.records[record.id] = record
        self._next_id += 1
        return record

    async def find_by_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for record in self.records.values():
            if record.user_id == user_id and record.date == work_date:
                return record
        return None

    async def insert(self, user_id, work_date, clock_in, status=AttendanceStatus.PRESENT):
        if await self.find_by_user_and_date(user_id, work_date):
            raise DatabaseConstraintError("duplicate (user_id, date)")
        return self.add(user_id, work_date, clock_in, status=AttendanceStatus(status).value)

    async def update_clock_out(self, record_id, clock_out, work_hours):
        record = self.records.get(record_id)
        if record is None:
            raise EntityNotFoundError(f"Attendance record {record_id} not found")
        if record.clock_out is not None:
            raise DatabaseConstraintError(f"Attendance record {record_id} already checked out")
        self.records[record_id] = dataclasses.replace(
            record, clock_out=to_naive_utc(clock_out), work_hours=work_hours
        )

    def _items(self, records: List[AttendanceRecord]) -> List[AttendanceListItem]:
        items = []
        for record in records:
            user = self.users.get(record.user_id)
            items.append(AttendanceListItem(
                record=record,
                user_name=user.name if user else f"user-{record.user_id}",
                department=user.department if user else None,
            ))
        return items

    def _in_month(self, month: str) -> List[AttendanceRecord]:
        start, end = parse_month(month)
        return [r for r in self.records.values() if start <= r.date < end]

    async def list_by_user_and_month(self, user_id, month):
        records = [r for r in self._in_month(month) if r.user_id == user_id]
        records.sort(key=lambda r: r.date, reverse=True)
        return self._items(records)

    async def list_by_month(self, month, status=None):
        records = self._in_month(month)
        if status is not None:
            records = [r for r in records if r.status == AttendanceStatus(status).value]
        items = self._items(records)
        items.sort(key=lambda i: i.user_name)
        items.sort(key=lambda i: i.record.date, reverse=True)
        return items

    async def aggregate_by_user_and_month(self, user_id, month):
        records = [r for r in self._in_month(month) if r.user_id == user_id]
        completed = [r for r in records if r.clock_out is not None]
        avg = Decimal("0")
        if completed:
            avg = (sum(r.work_hours for r in completed) / len(completed)).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
        return MonthlyAggregate(
            work_days=len(completed),
            avg_work_hours=avg,
            late_count=sum(1 for r in records if r.status == AttendanceStatus.LATE.value),
            absent_count=sum(1 for r in records if r.status == AttendanceStatus.ABSENT.value),
        )

    async def aggregate_today(self, work_date):
        active = {uid for uid, u in self.users.items() if u.is_active}
        records = [r for r in self.records.values() if r.date == work_date and r.user_id in active]
        return TodayAggregate(
            present_count=sum(1 for r in records if r.clock_in is not None),
            late_count=sum(1 for r in records if r.status == AttendanceStatus.LATE.value),
            absent_count=sum(1 for r in records if r.status == AttendanceStatus.ABSENT.value),
        )


class FakeUserRepository:
    """In-memory user directory."""

    def __init__(self, users: Dict[int, UserIdentity]):
        self.users = users

    async def get_by_slack_id(self, slack_user_id):
        if not slack_user_id:
            return None
        for user in self.users.values():
            if user.is_active and user.slack_user_id == slack_user_id:
                return user
        return None

    async def count_active(self):
        return sum(1 for u in self.users.values() if u.is_active)


@pytest.fixture
def clock():
    """Clock pinned to 2025-01-15 09:00 in Asia/Seoul."""
    return FixedClock(local_instant(2025, 1, 15, 9, 0, timezone=TZ), timezone=TZ)


@pytest.fixture
def sample_users():
    """Directory with one member, one admin and one inactive user."""
    return {
        1: UserIdentity(id=1, name="Alice", email="alice@example.com", role="MEMBER",
                        department="Engineering", slack_user_id="U001"),
        2: UserIdentity(id=2, name="Bob", email="bob@example.com", role="ADMIN",
                        slack_user_id="U002"),
        3: UserIdentity(id=3, name="Carol", email="carol@example.com", role="MEMBER",
                        is_active=False, slack_user_id="U003"),
    }


@pytest.fixture
def attendance_repo(sample_users):
    return FakeAttendanceRepository(sample_users)


@pytest.fixture
def user_repo(sample_users):
    return FakeUserRepository(sample_users)


@pytest.fixture
def service(attendance_repo, user_repo, clock):
    """Attendance service over the in-memory store."""
    return AttendanceService(attendance_repo, user_repo, clock, locale="en")


@pytest.fixture
def make_attendance_repo():
    """Factory for a fresh in-memory attendance store over a custom directory."""
    return FakeAttendanceRepository


@pytest.fixture
def make_user_repo():
    """Factory for an in-memory user directory."""
    return FakeUserRepository
