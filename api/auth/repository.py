"""
Refresh token table.

Tokens are stored as SHA-256 hashes. Inserts and rotation go through the
table engine; revocation needs `revoked_at IS NULL` guards, so it stays as
raw SQL inside the same store error mapping.
"""

from __future__ import annotations

from datetime import datetime, timezone

from core import db
from core.columns import ColumnDefinition, ColumnRegistry
from core.tables import NOW, Table

COLUMNS = ColumnRegistry(
    [
        ColumnDefinition(key="id", label="Refresh Token Number"),
        ColumnDefinition(key="user_no", label="User Number"),
        ColumnDefinition(key="token_hash", label="Token Hash", is_unique=True),
        ColumnDefinition(key="expires_at", label="Expires At"),
        ColumnDefinition(key="revoked_at", label="Revoked At"),
        ColumnDefinition(key="replaced_by_token_id", label="Replaced By Token Number"),
        ColumnDefinition(key="created_at", label="Created At"),
        ColumnDefinition(key="last_used_at", label="Last Used At"),
        ColumnDefinition(key="user_agent", label="User Agent"),
        ColumnDefinition(key="ip_address", label="IP Address"),
    ]
)

table = Table("refresh_tokens", "id", COLUMNS, record_name="Refresh token", touch_column=None)


async def insert_refresh_token(
    *,
    user_no: int,
    token_hash: str,
    expires_at: datetime,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> int:
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return await table.insert(
        {
            "user_no": user_no,
            "token_hash": token_hash,
            "expires_at": expires_at,
            "user_agent": user_agent,
            "ip_address": ip_address,
        }
    )


async def get_refresh_token_by_hash(token_hash: str) -> dict | None:
    async with table.store_errors():
        return await db.fetch_one(
            f"SELECT {', '.join(COLUMNS.selectable_keys())} FROM refresh_tokens WHERE token_hash = $1",
            token_hash,
        )


async def rotate_refresh_token(*, old_token_id: int, new_token_id: int) -> None:
    await table.update(
        old_token_id,
        {"revoked_at": NOW, "last_used_at": NOW, "replaced_by_token_id": new_token_id},
    )


async def _revoke(where_sql: str, value: int | str) -> bool:
    async with table.store_errors():
        revoked_id = await db.fetch_val(
            f"""
            UPDATE refresh_tokens
            SET revoked_at = now()
            WHERE {where_sql} = $1
              AND revoked_at IS NULL
            RETURNING id
            """,
            value,
        )
    return revoked_id is not None


async def revoke_refresh_token_by_id(token_id: int) -> bool:
    return await _revoke("id", token_id)


async def revoke_refresh_token_by_hash(token_hash: str) -> bool:
    return await _revoke("token_hash", token_hash)


async def revoke_all_refresh_tokens_for_user(user_no: int) -> None:
    async with table.store_errors():
        await db.execute(
            """
            UPDATE refresh_tokens
            SET revoked_at = now()
            WHERE user_no = $1
              AND revoked_at IS NULL
            """,
            user_no,
        )
