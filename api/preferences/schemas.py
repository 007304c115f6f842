"""
User preference API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel


class UserPreferenceRequest(BaseModel):
    dark_mode: bool | None = None
