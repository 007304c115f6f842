"""
Post API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel


class CreatePostRequest(BaseModel):
    body: str | None = None
    spotify_id: str | None = None
    spotify_record_type: str | None = None


class UpdatePostRequest(BaseModel):
    body: str | None = None
