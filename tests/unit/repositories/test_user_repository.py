"""
Unit tests for UserRepository.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from sqlalchemy.exc import OperationalError

from src.database.exceptions import DatabaseOperationError
from src.database.models import UserDB
from src.database.repositories.users import UserRepository


@pytest.fixture
def mock_database():
    """Mock database with session context manager."""
    db = Mock()
    session = AsyncMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    session.execute = AsyncMock()
    db.session = Mock(return_value=session)
    return db, session


@pytest.fixture
def user_repository(mock_database):
    db, session = mock_database
    return UserRepository(db=db), session


@pytest.fixture
def sample_user():
    return UserDB(
        id=1,
        email="alice@example.com",
        name="Alice",
        role="MEMBER",
        is_active=True,
        slack_user_id="U001",
    )


@pytest.mark.asyncio
async def test_get_by_slack_id(user_repository, sample_user):
    repo, session = user_repository
    result = Mock()
    result.first = Mock(return_value=(sample_user, "Engineering"))
    session.execute.return_value = result

    user = await repo.get_by_slack_id("U001")

    assert user.id == 1
    assert user.department == "Engineering"
    assert user.slack_user_id == "U001"


@pytest.mark.asyncio
async def test_get_by_slack_id_unknown(user_repository):
    repo, session = user_repository
    result = Mock()
    result.first = Mock(return_value=None)
    session.execute.return_value = result

    assert await repo.get_by_slack_id("U999") is None


@pytest.mark.asyncio
async def test_get_by_slack_id_empty_skips_query(user_repository):
    repo, session = user_repository

    assert await repo.get_by_slack_id("") is None
    session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_count_active(user_repository):
    repo, session = user_repository
    result = Mock()
    result.scalar = Mock(return_value=10)
    session.execute.return_value = result

    assert await repo.count_active() == 10


@pytest.mark.asyncio
async def test_get_by_slack_id_wraps_driver_errors(user_repository):
    repo, session = user_repository
    session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

    with pytest.raises(DatabaseOperationError):
        await repo.get_by_slack_id("U001")
