"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends, Header

from core import errors

from . import service


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise errors.UnauthorizedError("No access token provided")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise errors.UnauthorizedError("Invalid Authorization header format")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise errors.UnauthorizedError("Authorization must be: Bearer <token>")
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_user(access_token: str = Depends(get_bearer_token)) -> dict:
    return await service.get_user_from_access_token(access_token)


def ensure_owner(current_user: dict, user_no: int) -> None:
    """
    Owner-scoped mutations: the authenticated user must be the acting user.
    """
    if int(current_user["user_no"]) != int(user_no):
        raise errors.ForbiddenError(
            f"User (user_no: {current_user['user_no']}) cannot act on behalf of user (user_no: {user_no})"
        )
