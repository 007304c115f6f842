"""
Post table: column registry and engine instance.
"""

from __future__ import annotations

from core.columns import ALL_CONDITIONS, EQUAL_ONLY, ColumnDefinition, ColumnRegistry, max_length, one_of
from core.tables import Table

RECORD_TYPES = ("album", "track")

COLUMNS = ColumnRegistry(
    [
        ColumnDefinition(
            key="post_no",
            label="Post Number",
            is_sortable=True,
            filter_options=ALL_CONDITIONS,
        ),
        ColumnDefinition(
            key="user_no",
            label="User Number",
            is_sortable=True,
            filter_options=ALL_CONDITIONS,
            is_required_on_create=True,
        ),
        ColumnDefinition(
            key="body",
            label="Body",
            is_searchable=True,
            can_edit=True,
            check=max_length("Body", 2500),
        ),
        ColumnDefinition(
            key="spotify_id",
            label="Spotify ID",
            is_sortable=True,
            filter_options=EQUAL_ONLY,
            is_required_on_create=True,
        ),
        ColumnDefinition(
            key="spotify_record_type",
            label="Spotify Record Type",
            filter_options=EQUAL_ONLY,
            is_required_on_create=True,
            check=one_of("Spotify Record Type", RECORD_TYPES),
        ),
        ColumnDefinition(key="is_edited", label="Is Edited", filter_options=EQUAL_ONLY),
        ColumnDefinition(key="is_deleted", label="Is Deleted", filter_options=EQUAL_ONLY),
        ColumnDefinition(key="created_date", label="Created Date", is_sortable=True),
        ColumnDefinition(key="last_updated", label="Last Updated", is_sortable=True),
    ]
)

table = Table(
    "posts",
    "post_no",
    COLUMNS,
    record_name="Post",
    default_where={"is_deleted": {"value": False}},
)
