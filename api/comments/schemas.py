"""
Comment API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel


class CreateCommentRequest(BaseModel):
    post_no: int | None = None
    parent_comment_no: int | None = None
    body: str | None = None
