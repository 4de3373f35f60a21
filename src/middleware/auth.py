"""
Cookie-carried JWT identity.

Resolves the access token cookie into a CurrentUser for route handlers.
Credential checks and password hashing happen in the login flow, not here.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt

from config import settings
from ..database.models import UserRoleEnum

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """Identity injected into route handlers."""
    id: int
    role: str
    email: Optional[str] = None
    department_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRoleEnum.ADMIN.value


def create_access_token(
    user_id: int,
    email: str,
    role: str = UserRoleEnum.MEMBER.value,
    department_id: Optional[int] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign an access token for the given user."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.access_token_expire_days)
    )
    payload = {
        "userId": user_id,
        "email": email,
        "role": role,
        "departmentId": department_id,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> CurrentUser:
    """
    Verify a token and build the CurrentUser.

    Raises:
        HTTPException 401: invalid, expired or incomplete token
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    user_id = payload.get("userId")
    role = payload.get("role")
    if user_id is None or role is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        return CurrentUser(
            id=int(user_id),
            role=str(role),
            email=payload.get("email"),
            department_id=payload.get("departmentId"),
        )
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )


def get_current_user(request: Request) -> CurrentUser:
    """FastAPI dependency: identity from the access token cookie."""
    token = request.cookies.get(settings.access_token_cookie)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login required",
        )
    return decode_access_token(token)


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """FastAPI dependency: identity that must hold the ADMIN role."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user
