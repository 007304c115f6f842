"""
Like API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel


class LikeRequest(BaseModel):
    reference_no: int
    reference_table: str
    is_like: bool = True


class LikeCountRequest(BaseModel):
    reference_no: int
    reference_table: str
