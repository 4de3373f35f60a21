"""
Repository classes for database operations.

Each repository handles queries for its entity type and returns typed
domain objects.
"""

from .attendance import AttendanceRepository, get_attendance_repository
from .users import UserRepository, get_user_repository

__all__ = [
    "AttendanceRepository",
    "get_attendance_repository",
    "UserRepository",
    "get_user_repository",
]
