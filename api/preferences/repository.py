"""
User preference table: column registry and engine instance.

Each user has at most one preference row; lookups go through `user_no`.
"""

from __future__ import annotations

from core.columns import ALL_CONDITIONS, EQUAL_ONLY, ColumnDefinition, ColumnRegistry
from core.tables import Table

COLUMNS = ColumnRegistry(
    [
        ColumnDefinition(
            key="user_preference_no",
            label="User Preference Number",
            is_sortable=True,
            filter_options=ALL_CONDITIONS,
        ),
        ColumnDefinition(
            key="user_no",
            label="User Number",
            is_sortable=True,
            filter_options=ALL_CONDITIONS,
            is_required_on_create=True,
            is_unique=True,
        ),
        ColumnDefinition(
            key="dark_mode",
            label="Dark Mode",
            filter_options=EQUAL_ONLY,
            can_edit=True,
        ),
        ColumnDefinition(key="is_deleted", label="Is Deleted", filter_options=EQUAL_ONLY),
        ColumnDefinition(key="last_updated", label="Last Updated", is_sortable=True),
    ]
)

table = Table(
    "user_preferences",
    "user_preference_no",
    COLUMNS,
    record_name="User preference",
    default_where={"is_deleted": {"value": False}},
)
