"""
User table: column registry, engine instance and credential lookups.
"""

from __future__ import annotations

import re

from core import db
from core.columns import (
    ALL_CONDITIONS,
    EQUAL_ONLY,
    ColumnDefinition,
    ColumnRegistry,
    FieldRule,
    all_of,
    equals_field,
    matches,
    max_length,
)
from core.tables import Table

USERNAME_PATTERN = r"^([A-Za-z0-9_](?:(?:[A-Za-z0-9_]|(?:.(?!.))){0,28}(?:[A-Za-z0-9_]))?)$"
EMAIL_PATTERN = (
    r'^(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))@'
    r"((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$"
)

COLUMNS = ColumnRegistry(
    [
        ColumnDefinition(
            key="user_no",
            label="User Number",
            is_sortable=True,
            filter_options=ALL_CONDITIONS,
        ),
        ColumnDefinition(
            key="first_name",
            label="First Name",
            is_searchable=True,
            is_sortable=True,
            is_required_on_create=True,
            can_edit=True,
            check=max_length("First Name", 255),
        ),
        ColumnDefinition(
            key="last_name",
            label="Last Name",
            is_searchable=True,
            is_sortable=True,
            is_required_on_create=True,
            can_edit=True,
            check=max_length("Last Name", 255),
        ),
        ColumnDefinition(
            key="bio",
            label="Bio",
            can_edit=True,
            check=max_length("Bio", 150),
        ),
        ColumnDefinition(
            key="username",
            label="Username",
            is_searchable=True,
            is_sortable=True,
            is_required_on_create=True,
            can_edit=True,
            is_unique=True,
            check=all_of(
                max_length("Username", 30),
                matches(USERNAME_PATTERN, "Username is invalid"),
            ),
        ),
        ColumnDefinition(
            key="email",
            label="Email",
            is_searchable=True,
            is_sortable=True,
            is_required_on_create=True,
            can_edit=True,
            is_unique=True,
            check=all_of(
                max_length("Email", 255),
                matches(EMAIL_PATTERN, "Email is invalid", flags=re.IGNORECASE),
            ),
        ),
        ColumnDefinition(
            key="password",
            label="Password",
            is_selectable=False,
            is_required_on_create=True,
            check=max_length("Password", 50),
        ),
        ColumnDefinition(
            key="profile_picture",
            label="Profile Picture",
            can_edit=True,
            check=max_length("Profile Picture", 255, "Profile Picture is invalid"),
        ),
        ColumnDefinition(key="is_deleted", label="Is Deleted", filter_options=EQUAL_ONLY),
        ColumnDefinition(key="is_banned", label="Is Banned", filter_options=EQUAL_ONLY),
        ColumnDefinition(key="last_login_date", label="Last Login Date", is_sortable=True),
        ColumnDefinition(key="created_date", label="Created Date", is_sortable=True),
        ColumnDefinition(key="last_updated", label="Last Updated", is_sortable=True),
    ]
)

# Submission-only field; never stored.
CONFIRM_PASSWORD = ColumnDefinition(
    key="confirm_password",
    label="Confirm Password",
    is_selectable=False,
    check=equals_field("password", "Passwords must match"),
)

table = Table(
    "users",
    "user_no",
    COLUMNS,
    record_name="User",
    default_where={"is_deleted": {"value": False}},
)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_rules() -> list[FieldRule]:
    return [*COLUMNS.create_rules(), FieldRule(CONFIRM_PASSWORD, True)]


def password_rules() -> list[FieldRule]:
    return [FieldRule(COLUMNS.get("password"), True), FieldRule(CONFIRM_PASSWORD, True)]


async def get_user_by_email(email: str) -> dict | None:
    async with table.store_errors():
        return await db.fetch_one(
            f"""
            SELECT {", ".join(COLUMNS.selectable_keys())}
            FROM users
            WHERE lower(email) = $1
            """,
            normalize_email(email),
        )


async def get_credentials_by_email(email: str) -> dict | None:
    async with table.store_errors():
        return await db.fetch_one(
            """
            SELECT user_no, password, is_deleted, is_banned
            FROM users
            WHERE lower(email) = $1
            """,
            normalize_email(email),
        )


async def get_password_hash(user_no: int) -> str | None:
    async with table.store_errors():
        return await db.fetch_val("SELECT password FROM users WHERE user_no = $1", user_no)
