"""
User business logic.

Every read path (get, list, search) returns the same record shape: the
selectable user columns plus `post_count`, `follower_count` and
`following_count`. The password hash never leaves this module.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from auth import security
from core import errors
from core.query import OrderBy, merge_where
from core.tables import NOW
from core.validation import clean_values, validate_submission
from follows import repository as follows_repository
from posts import repository as posts_repository

from . import repository

logger = logging.getLogger(__name__)

SEARCH_WHERE = {"is_deleted": {"value": False}, "is_banned": {"value": False}}
CREATE_KEYS = ("first_name", "last_name", "username", "email")


async def _with_counts(record: dict[str, Any]) -> dict[str, Any]:
    user_no = record["user_no"]
    post_count, follower_count, following_count = await asyncio.gather(
        posts_repository.table.count({"user_no": {"value": user_no}, "is_deleted": {"value": False}}),
        follows_repository.table.count({"user_no": {"value": user_no}, "is_following": {"value": True}}),
        follows_repository.table.count(
            {"follower_user_no": {"value": user_no}, "is_following": {"value": True}}
        ),
    )
    return {
        **record,
        "post_count": post_count,
        "follower_count": follower_count,
        "following_count": following_count,
    }


async def create_user(submission: dict[str, Any]) -> dict[str, Any]:
    failure = validate_submission(repository.create_rules(), submission)
    if failure is not None:
        raise failure

    values = clean_values(submission, CREATE_KEYS)
    values["email"] = repository.normalize_email(values["email"])
    values["password"] = security.hash_password(str(submission["password"]))

    user_no = await repository.table.insert(values)
    logger.info("user_created user_no=%s", user_no)
    return await get_user(user_no)


async def get_user(user_no: int) -> dict[str, Any]:
    record = await repository.table.get(user_no)
    return await _with_counts(record)


async def get_user_by_email(email: str) -> dict[str, Any]:
    record = await repository.get_user_by_email(email)
    if record is None:
        raise repository.table.not_found("email", email)
    return await _with_counts(record)


async def list_users(
    where: dict[str, Any] | None = None,
    *,
    items_per_page: int | None = None,
    page_no: int = 1,
    order_by: OrderBy | None = None,
) -> dict[str, Any]:
    options = repository.table.options(
        where,
        items_per_page=items_per_page,
        page_no=page_no,
        order_by=order_by,
    )
    result = await repository.table.list(options)
    data = await asyncio.gather(*(_with_counts(record) for record in result.data))
    return {"data": list(data), "pagination": result.pagination.as_dict()}


async def count_users(where: dict[str, Any] | None = None) -> int:
    return await repository.table.count(merge_where(repository.table.default_where, where))


async def search_users(term: str, columns: Any = None) -> list[dict[str, Any]]:
    records = await repository.table.search(term, columns, where=SEARCH_WHERE)
    return list(await asyncio.gather(*(_with_counts(record) for record in records)))


async def update_user(user_no: int, submission: dict[str, Any]) -> dict[str, Any]:
    repository.table.validate_record_no(user_no)
    rules = repository.COLUMNS.update_rules()
    failure = validate_submission(rules, submission)
    if failure is not None:
        raise failure

    await repository.table.get(user_no)
    values = clean_values(submission, [rule.column.key for rule in rules])
    if "email" in values:
        values["email"] = repository.normalize_email(values["email"])
    await repository.table.update(user_no, values)
    return await get_user(user_no)


async def delete_user(user_no: int) -> bool:
    record = await repository.table.get(user_no)
    await repository.table.update(record["user_no"], {"is_deleted": True})
    await get_user(user_no)
    logger.info("user_deleted user_no=%s", user_no)
    return True


async def update_password(
    user_no: int,
    current_password: str,
    new_password: str,
    confirm_new_password: str,
) -> dict[str, Any]:
    repository.table.validate_record_no(user_no)
    failure = validate_submission(
        repository.password_rules(),
        {"password": new_password, "confirm_password": confirm_new_password},
    )
    if failure is not None:
        raise failure

    password_hash = await repository.get_password_hash(user_no)
    if password_hash is None:
        raise repository.table.not_found("user_no", user_no)
    if not security.verify_password(current_password, password_hash):
        raise errors.UnauthorizedError("Password does not match hashed password")

    await repository.table.update(user_no, {"password": security.hash_password(new_password)})
    logger.info("user_password_updated user_no=%s", user_no)
    return await get_user(user_no)


async def update_last_login_date(user_no: int) -> dict[str, Any]:
    await repository.table.update(user_no, {"last_login_date": NOW})
    return await get_user(user_no)


def sortable_columns() -> list[str]:
    return repository.table.sortable_columns()


def filter_conditions(key: str) -> list[str]:
    return [condition.value for condition in repository.table.filter_conditions(key)]
