"""
Auth business logic: login, refresh token rotation, logout and access token
resolution.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from core import errors
from users import repository as users_repository
from users import service as users_service

from . import repository, schemas, security

logger = logging.getLogger(__name__)

BLOCKING_FLAGS = ("is_banned", "is_deleted")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_not_blocked(user_row: dict) -> None:
    for key in BLOCKING_FLAGS:
        if user_row.get(key):
            raise errors.ForbiddenError(f"User is forbidden. Reason: {key}")


async def _issue_token_pair(
    *,
    user_row: dict,
    user_agent: str | None = None,
    ip_address: str | None = None,
    replaced_token_id: int | None = None,
) -> schemas.TokenPairResponse:
    user_no = int(user_row["user_no"])

    access_token = security.build_access_token(user_no=user_no, email=str(user_row["email"]))
    raw_refresh_token = security.build_refresh_token()
    refresh_token_id = await repository.insert_refresh_token(
        user_no=user_no,
        token_hash=security.hash_refresh_token(raw_refresh_token),
        expires_at=_utc_now() + timedelta(days=security.refresh_token_expire_days()),
        user_agent=user_agent,
        ip_address=ip_address,
    )

    if replaced_token_id is not None:
        await repository.rotate_refresh_token(
            old_token_id=replaced_token_id,
            new_token_id=refresh_token_id,
        )

    return schemas.TokenPairResponse(
        access_token=access_token,
        refresh_token=raw_refresh_token,
    )


async def login(
    payload: schemas.LoginRequest,
    *,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> schemas.AuthResponse:
    credentials = await users_repository.get_credentials_by_email(payload.email)
    if credentials is None:
        raise errors.UnauthorizedError("Invalid email or password")

    _ensure_not_blocked(credentials)

    if not security.verify_password(payload.password, str(credentials.get("password") or "")):
        raise errors.UnauthorizedError("Passwords do not match")

    user = await users_service.update_last_login_date(int(credentials["user_no"]))
    tokens = await _issue_token_pair(user_row=user, user_agent=user_agent, ip_address=ip_address)
    logger.info("user_logged_in user_no=%s", user["user_no"])
    return schemas.AuthResponse(user=user, tokens=tokens)


async def refresh_tokens(
    payload: schemas.RefreshRequest,
    *,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> schemas.TokenPairResponse:
    incoming_refresh = (payload.refresh_token or "").strip()
    if not incoming_refresh:
        raise errors.BadRequestError("refresh_token is required")

    old_token_row = await repository.get_refresh_token_by_hash(security.hash_refresh_token(incoming_refresh))
    if old_token_row is None:
        raise errors.UnauthorizedError("Invalid refresh token")

    if old_token_row.get("revoked_at") is not None:
        raise errors.UnauthorizedError("Refresh token is revoked")

    old_token_id = int(old_token_row["id"])
    expires_at = old_token_row.get("expires_at")
    if not isinstance(expires_at, datetime) or expires_at <= _utc_now():
        await repository.revoke_refresh_token_by_id(old_token_id)
        raise errors.UnauthorizedError("Refresh token is expired")

    try:
        user_row = await users_service.get_user(int(old_token_row["user_no"]))
    except errors.NotFoundError:
        user_row = None

    if user_row is None or any(user_row.get(key) for key in BLOCKING_FLAGS):
        await repository.revoke_refresh_token_by_id(old_token_id)
        raise errors.UnauthorizedError("Invalid refresh token owner")

    return await _issue_token_pair(
        user_row=user_row,
        user_agent=user_agent,
        ip_address=ip_address,
        replaced_token_id=old_token_id,
    )


async def logout(
    payload: schemas.LogoutRequest,
    *,
    current_user_no: int | None = None,
) -> dict[str, bool]:
    refresh_token = (payload.refresh_token or "").strip()
    if refresh_token:
        await repository.revoke_refresh_token_by_hash(security.hash_refresh_token(refresh_token))
        return {"ok": True}

    if current_user_no is not None:
        await repository.revoke_all_refresh_tokens_for_user(current_user_no)
        return {"ok": True}

    raise errors.BadRequestError("Provide refresh_token or authenticated user")


async def get_user_from_access_token(access_token: str) -> dict:
    try:
        payload = security.decode_access_token(access_token)
        user_no = security.access_token_user_no(payload)
    except security.AuthSecurityError as exc:
        raise errors.UnauthorizedError(str(exc)) from exc

    try:
        user_row = await users_service.get_user(user_no)
    except errors.NotFoundError as exc:
        raise errors.UnauthorizedError("User not found") from exc

    _ensure_not_blocked(user_row)
    return user_row
