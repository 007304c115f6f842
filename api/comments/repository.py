"""
Comment table: column registry and engine instance.
"""

from __future__ import annotations

from core.columns import EQUAL_ONLY, ColumnDefinition, ColumnRegistry, max_length
from core.tables import Table

COLUMNS = ColumnRegistry(
    [
        ColumnDefinition(
            key="comment_no",
            label="Comment Number",
            is_sortable=True,
            filter_options=EQUAL_ONLY,
        ),
        ColumnDefinition(
            key="parent_comment_no",
            label="Parent Comment Number",
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
            key="post_no",
            label="Post Number",
            is_sortable=True,
            filter_options=EQUAL_ONLY,
            is_required_on_create=True,
        ),
        ColumnDefinition(
            key="body",
            label="Body",
            is_searchable=True,
            is_required_on_create=True,
            check=max_length("Body", 500),
        ),
        ColumnDefinition(key="is_deleted", label="Is Deleted", filter_options=EQUAL_ONLY),
        ColumnDefinition(key="created_date", label="Created Date", is_sortable=True),
    ]
)

# Comments are never edited, so there is no last-updated column to touch.
table = Table("comments", "comment_no", COLUMNS, record_name="Comment", touch_column=None)
