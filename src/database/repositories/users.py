"""
User directory repository.

Read-only lookups the attendance core needs: resolve a user by external Slack
identity and count active users.
"""

import logging
from typing import Optional

from sqlalchemy import select, func, and_

from ..connection import Database, get_database
from ..models import UserDB, DepartmentDB
from ..exceptions import DatabaseOperationError
from ...models.attendance import UserIdentity

logger = logging.getLogger(__name__)


def to_identity(row: UserDB, department: Optional[str] = None) -> UserIdentity:
    return UserIdentity(
        id=row.id,
        name=row.name,
        email=row.email,
        role=row.role,
        is_active=bool(row.is_active),
        department=department,
        slack_user_id=row.slack_user_id,
    )


class UserRepository:
    """Repository for user directory lookups."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_database()

    async def _get_one(self, condition) -> Optional[UserIdentity]:
        async with self.db.session() as session:
            result = await session.execute(
                select(UserDB, DepartmentDB.name)
                .outerjoin(DepartmentDB, UserDB.department_id == DepartmentDB.id)
                .where(and_(condition, UserDB.is_active.is_(True)))
                .limit(1)
            )
            row = result.first()
            if row is None:
                return None
            user, department = row
            return to_identity(user, department)

    async def get_by_slack_id(self, slack_user_id: str) -> Optional[UserIdentity]:
        """Map an external Slack member id to an active internal user."""
        if not slack_user_id:
            return None
        try:
            return await self._get_one(UserDB.slack_user_id == slack_user_id)
        except Exception as e:
            logger.error(f"Error fetching user by Slack id {slack_user_id}: {e}", exc_info=True)
            raise DatabaseOperationError(f"Failed to fetch user by Slack id {slack_user_id}") from e

    async def count_active(self) -> int:
        """Number of active users."""
        async with self.db.session() as session:
            try:
                result = await session.execute(
                    select(func.count(UserDB.id)).where(UserDB.is_active.is_(True))
                )
                return int(result.scalar() or 0)
            except Exception as e:
                logger.error(f"Error counting active users: {e}", exc_info=True)
                raise DatabaseOperationError("Failed to count active users") from e


# Singleton
_user_repository: Optional[UserRepository] = None


def get_user_repository() -> UserRepository:
    """Get the user repository singleton."""
    global _user_repository
    if _user_repository is None:
        _user_repository = UserRepository()
    return _user_repository
