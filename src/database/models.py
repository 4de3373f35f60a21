"""
SQLAlchemy models for the relational store.

Schema includes:
- Departments
- Users (with their external Slack identity)
- Attendance records, one per user per calendar day
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from sqlalchemy import (
    String,
    Text,
    Integer,
    Boolean,
    DateTime,
    Date,
    Numeric,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column
from sqlalchemy.sql import func
import enum

from ..models.attendance import AttendanceStatus

ATTENDANCE_DAY_CONSTRAINT = "uq_attendance_user_date"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ==================== ENUMS ====================

class UserRoleEnum(str, enum.Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


# ==================== DIRECTORY ====================

class DepartmentDB(Base):
    """Organisational departments."""
    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    users: Mapped[List["UserDB"]] = relationship(back_populates="department")


class UserDB(Base):
    """Team members. Only the columns the attendance core reads are mapped."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    department_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True
    )
    role: Mapped[str] = mapped_column(String(20), default=UserRoleEnum.MEMBER.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # External chat identity (Slack member ID, e.g. U024BE7LH)
    slack_user_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, unique=True)

    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    department: Mapped[Optional[DepartmentDB]] = relationship(back_populates="users")
    attendances: Mapped[List["AttendanceRecordDB"]] = relationship(back_populates="user")

    __table_args__ = (
        Index("idx_users_active", "is_active"),
        Index("idx_users_name", "name"),
    )


# ==================== ATTENDANCE ====================

class AttendanceRecordDB(Base):
    """One check-in/check-out record per user per calendar day."""
    __tablename__ = "attendances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # Business day in the deployment timezone
    work_date: Mapped[date] = mapped_column("date", Date, nullable=False)

    # Naive UTC instants
    clock_in: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    clock_out: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    work_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default=AttendanceStatus.PRESENT.value)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    user: Mapped[UserDB] = relationship(back_populates="attendances")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name=ATTENDANCE_DAY_CONSTRAINT),
        Index("idx_attendance_date", "date"),
        Index("idx_attendance_status", "status"),
    )
