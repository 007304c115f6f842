"""
Follow API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel


class FollowRequest(BaseModel):
    user_no: int
    should_follow: bool = True


class UpdateFollowRequest(BaseModel):
    is_following: bool | None = None
