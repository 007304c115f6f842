"""
User API schemas (request models).

Submission fields are optional here; required-ness and length rules are
enforced by the user column registry so every failure is reported at once.
"""

from __future__ import annotations

from pydantic import BaseModel


class CreateUserRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    email: str | None = None
    password: str | None = None
    confirm_password: str | None = None


class UpdateUserRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    username: str | None = None
    email: str | None = None
    profile_picture: str | None = None


class UpdatePasswordRequest(BaseModel):
    current_password: str = ""
    new_password: str = ""
    confirm_new_password: str = ""
