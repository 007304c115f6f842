"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=20)


class LogoutRequest(BaseModel):
    # Omitted: revoke every session of the authenticated user.
    refresh_token: str | None = Field(default=None, min_length=20)


class SessionUser(BaseModel):
    """
    The signed-in user as returned by login and /auth/me. Extra record
    fields are dropped.
    """

    user_no: int
    username: str
    email: str
    first_name: str
    last_name: str
    bio: str | None = None
    profile_picture: str | None = None
    post_count: int = 0
    follower_count: int = 0
    following_count: int = 0


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    user: SessionUser
    tokens: TokenPairResponse
