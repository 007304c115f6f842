"""
User preference business logic.
"""

from __future__ import annotations

import logging
from typing import Any

from core import errors
from core.query import OrderBy, merge_where
from core.validation import clean_values, validate_submission
from users import service as users_service

from . import repository

logger = logging.getLogger(__name__)


async def create_user_preference(submission: dict[str, Any]) -> dict[str, Any]:
    failure = validate_submission(repository.COLUMNS.create_rules(), submission)
    if failure is not None:
        raise failure

    user = await users_service.get_user(submission["user_no"])
    if user["is_deleted"] or user["is_banned"]:
        raise errors.ForbiddenError(
            f"User (user_no: {user['user_no']}) does not have access to create a user preference"
        )

    await repository.table.insert(
        {"user_no": user["user_no"], "dark_mode": bool(submission.get("dark_mode", False))}
    )
    logger.info("user_preference_created user_no=%s", user["user_no"])
    return await get_user_preference(user["user_no"])


async def update_user_preference(user_no: int, submission: dict[str, Any]) -> dict[str, Any]:
    repository.table.validate_record_no(user_no, "user_no")
    rules = repository.COLUMNS.update_rules()
    failure = validate_submission(rules, submission)
    if failure is not None:
        raise failure

    await get_user_preference(user_no)
    values = clean_values(submission, [rule.column.key for rule in rules])
    await repository.table.update(user_no, values, column="user_no")
    return await get_user_preference(user_no)


async def get_user_preference(user_no: int) -> dict[str, Any]:
    return await repository.table.get_by("user_no", user_no)


async def list_user_preferences(
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
    return result.as_dict()


async def count_user_preferences(where: dict[str, Any] | None = None) -> int:
    return await repository.table.count(merge_where(repository.table.default_where, where))


async def delete_user_preference(user_no: int) -> bool:
    await get_user_preference(user_no)
    await repository.table.update(user_no, {"is_deleted": True}, column="user_no")
    await get_user_preference(user_no)
    logger.info("user_preference_deleted user_no=%s", user_no)
    return True


def sortable_columns() -> list[str]:
    return repository.table.sortable_columns()


def filter_conditions(key: str) -> list[str]:
    return [condition.value for condition in repository.table.filter_conditions(key)]
