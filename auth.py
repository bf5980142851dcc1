"""
Bearer token handling.

Tokens are issued by the external auth provider; this service only needs
to read the user id (``sub``) and role out of them.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from config import get_settings
from exceptions import NotAuthenticatedError
from models import UserRole
from schemas import TokenData


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    payload = dict(data)
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload["exp"] = expire
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


async def verify_token(token: str) -> TokenData:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise NotAuthenticatedError("Session expired. Please sign in again.")
    except jwt.InvalidTokenError:
        raise NotAuthenticatedError()

    user_id = payload.get("sub")
    if not user_id:
        raise NotAuthenticatedError()

    try:
        role = UserRole(payload.get("role", UserRole.USER.value))
    except ValueError:
        role = UserRole.USER
    return TokenData(user_id=str(user_id), role=role)
