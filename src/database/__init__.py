"""
Relational store for the TeamCollab backend.

Handles:
- Async engine and session lifecycle
- Directory tables (users, departments)
- Attendance records
"""

from .connection import (
    get_database,
    Database,
    init_database,
    close_database,
)
from .models import (
    Base,
    DepartmentDB,
    UserDB,
    UserRoleEnum,
    AttendanceRecordDB,
)

__all__ = [
    "get_database",
    "Database",
    "init_database",
    "close_database",
    "Base",
    "DepartmentDB",
    "UserDB",
    "UserRoleEnum",
    "AttendanceRecordDB",
]
