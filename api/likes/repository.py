"""
Like table: column registry and engine instance.

One row per (user, reference_table, reference_no); the store enforces it.
"""

from __future__ import annotations

from core.columns import EQUAL_ONLY, ColumnDefinition, ColumnRegistry, greater_than_zero, one_of
from core.tables import Table

REFERENCE_TABLES = ("comments", "posts")
RELATION_KEY = ("user_no", "reference_table", "reference_no")

COLUMNS = ColumnRegistry(
    [
        ColumnDefinition(
            key="like_no",
            label="Like Number",
            is_sortable=True,
            filter_options=EQUAL_ONLY,
        ),
        ColumnDefinition(
            key="user_no",
            label="User Number",
            is_sortable=True,
            filter_options=EQUAL_ONLY,
            is_required_on_create=True,
        ),
        ColumnDefinition(
            key="reference_table",
            label="Reference Table",
            filter_options=EQUAL_ONLY,
            is_required_on_create=True,
            check=one_of("Reference Table", REFERENCE_TABLES),
        ),
        ColumnDefinition(
            key="reference_no",
            label="Reference Number",
            is_sortable=True,
            filter_options=EQUAL_ONLY,
            is_required_on_create=True,
            check=greater_than_zero("Reference Number"),
        ),
        ColumnDefinition(
            key="is_active",
            label="Is Active",
            filter_options=EQUAL_ONLY,
            can_edit=True,
        ),
        ColumnDefinition(key="created_date", label="Created Date", is_sortable=True),
        ColumnDefinition(key="last_updated", label="Last Updated", is_sortable=True),
    ]
)

table = Table(
    "likes",
    "like_no",
    COLUMNS,
    record_name="Like",
    default_where={"is_active": {"value": True}},
)
