"""
Follow table: column registry and engine instance.

`user_no` is the followed user, `follower_user_no` the one following.
"""

from __future__ import annotations

from core.columns import EQUAL_ONLY, ColumnDefinition, ColumnRegistry
from core.tables import Table

RELATION_KEY = ("user_no", "follower_user_no")

COLUMNS = ColumnRegistry(
    [
        ColumnDefinition(
            key="follow_no",
            label="Follow Number",
            is_sortable=True,
            filter_options=EQUAL_ONLY,
        ),
        ColumnDefinition(
            key="follower_user_no",
            label="Follower User Number",
            is_sortable=True,
            filter_options=EQUAL_ONLY,
            is_required_on_create=True,
        ),
        ColumnDefinition(
            key="user_no",
            label="User Number",
            is_sortable=True,
            filter_options=EQUAL_ONLY,
            is_required_on_create=True,
        ),
        ColumnDefinition(
            key="is_following",
            label="Is Following",
            filter_options=EQUAL_ONLY,
            can_edit=True,
        ),
        ColumnDefinition(key="follow_date", label="Follow Date", is_sortable=True),
        ColumnDefinition(key="unfollow_date", label="Unfollow Date", is_sortable=True),
        ColumnDefinition(key="created_date", label="Created Date", is_sortable=True),
        ColumnDefinition(key="last_updated", label="Last Updated", is_sortable=True),
    ]
)

table = Table("follows", "follow_no", COLUMNS, record_name="Follow")
