"""
Tests for cookie-carried JWT identity (src/middleware/auth.py).
"""

import pytest
from datetime import timedelta
from unittest.mock import Mock

from fastapi import HTTPException
from jose import jwt

from config import settings
from src.middleware.auth import (
    CurrentUser,
    create_access_token,
    decode_access_token,
    get_current_user,
    require_admin,
)


def _request_with_cookie(token=None):
    request = Mock()
    request.cookies = {settings.access_token_cookie: token} if token else {}
    return request


class TestTokens:

    def test_round_trip(self):
        token = create_access_token(42, "alice@example.com", role="ADMIN", department_id=3)

        user = decode_access_token(token)

        assert user == CurrentUser(id=42, role="ADMIN", email="alice@example.com", department_id=3)
        assert user.is_admin

    def test_expired_token_rejected(self):
        token = create_access_token(1, "a@example.com", expires_delta=timedelta(seconds=-5))

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token)

        assert exc_info.value.status_code == 401

    def test_wrong_secret_rejected(self):
        token = jwt.encode({"userId": 1, "role": "MEMBER"}, "not-the-secret", algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token)

        assert exc_info.value.status_code == 401

    def test_missing_claims_rejected(self):
        token = jwt.encode({"email": "a@example.com"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token)

        assert exc_info.value.detail == "Invalid token payload"


class TestDependencies:

    def test_get_current_user_requires_cookie(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_request_with_cookie())

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Login required"

    def test_get_current_user_from_cookie(self):
        token = create_access_token(7, "bob@example.com")

        user = get_current_user(_request_with_cookie(token))

        assert user.id == 7
        assert user.role == "MEMBER"
        assert not user.is_admin

    def test_require_admin_rejects_member(self):
        with pytest.raises(HTTPException) as exc_info:
            require_admin(CurrentUser(id=1, role="MEMBER"))

        assert exc_info.value.status_code == 403

    def test_require_admin_accepts_admin(self):
        admin = CurrentUser(id=2, role="ADMIN")
        assert require_admin(admin) is admin
