"""
Post business logic.
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

SEARCH_WHERE = {"is_deleted": {"value": False}}
CREATE_KEYS = ("user_no", "body", "spotify_id", "spotify_record_type")


def _ensure_author(post: dict[str, Any], acting_user_no: int | None) -> None:
    if acting_user_no is not None and post["user_no"] != acting_user_no:
        raise errors.ForbiddenError(
            f"User (user_no: {acting_user_no}) does not have access to post (post_no: {post['post_no']})"
        )


async def create_post(submission: dict[str, Any]) -> dict[str, Any]:
    failure = validate_submission(repository.COLUMNS.create_rules(), submission)
    if failure is not None:
        raise failure

    user = await users_service.get_user(submission["user_no"])
    if user["is_deleted"] or user["is_banned"]:
        raise errors.ForbiddenError(f"User (user_no: {user['user_no']}) does not have access to create a post")

    post_no = await repository.table.insert(clean_values(submission, CREATE_KEYS))
    logger.info("post_created post_no=%s user_no=%s", post_no, user["user_no"])
    return await get_post(post_no)


async def get_post(post_no: int) -> dict[str, Any]:
    return await repository.table.get(post_no)


async def list_posts(
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


async def count_posts(where: dict[str, Any] | None = None) -> int:
    return await repository.table.count(merge_where(repository.table.default_where, where))


async def search_posts(term: str, columns: Any = None) -> list[dict[str, Any]]:
    return await repository.table.search(term, columns, where=SEARCH_WHERE)


async def update_post(
    post_no: int,
    submission: dict[str, Any],
    *,
    acting_user_no: int | None = None,
) -> dict[str, Any]:
    repository.table.validate_record_no(post_no)
    rules = repository.COLUMNS.update_rules()
    failure = validate_submission(rules, submission)
    if failure is not None:
        raise failure

    post = await get_post(post_no)
    _ensure_author(post, acting_user_no)
    if post["is_deleted"]:
        raise errors.ForbiddenError(f"Post with a post_no of {post_no} has been deleted")

    values = clean_values(submission, [rule.column.key for rule in rules])
    if "body" in values and values["body"] != post["body"]:
        values["is_edited"] = True

    await repository.table.update(post_no, values)
    logger.info("post_updated post_no=%s fields=%s", post_no, sorted(values))
    return await get_post(post_no)


async def delete_post(post_no: int, *, acting_user_no: int | None = None) -> bool:
    post = await get_post(post_no)
    _ensure_author(post, acting_user_no)
    await repository.table.update(post_no, {"is_deleted": True})
    await get_post(post_no)
    logger.info("post_deleted post_no=%s", post_no)
    return True


def sortable_columns() -> list[str]:
    return repository.table.sortable_columns()


def filter_conditions(key: str) -> list[str]:
    return [condition.value for condition in repository.table.filter_conditions(key)]
