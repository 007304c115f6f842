"""
Like business logic.

`like_request` is the toggle entry point: it leaves exactly one like row per
(user, reference) pair in the requested state, using a single
INSERT ... ON CONFLICT statement so concurrent requests cannot duplicate it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from comments import service as comments_service
from core import errors
from core.query import OrderBy
from core.validation import clean_values, validate_submission
from posts import service as posts_service
from users import service as users_service

from . import repository

logger = logging.getLogger(__name__)


def _reference_lookup(reference_table: str, reference_no: int):
    if reference_table == "comments":
        return comments_service.get_comment(reference_no)
    return posts_service.get_post(reference_no)


def _ensure_can_like(user: dict[str, Any]) -> None:
    if user["is_deleted"]:
        raise errors.ForbiddenError(f"User (user_no: {user['user_no']}) has been deleted")
    if user["is_banned"]:
        raise errors.ForbiddenError(f"User (user_no: {user['user_no']}) has been banned")


async def create_like(submission: dict[str, Any]) -> dict[str, Any]:
    failure = validate_submission(repository.COLUMNS.create_rules(), submission)
    if failure is not None:
        raise failure

    values = clean_values(submission, repository.RELATION_KEY)
    values["is_active"] = bool(submission.get("is_active", True))
    like_no = await repository.table.insert(values)
    logger.info("like_created like_no=%s", like_no)
    return await get_like(like_no)


async def update_like(like_no: int, is_active: bool) -> dict[str, Any]:
    await get_like(like_no)
    await repository.table.update(like_no, {"is_active": bool(is_active)})
    return await get_like(like_no)


async def get_like(like_no: int) -> dict[str, Any]:
    return await repository.table.get(like_no)


async def list_likes(
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


async def like_request(
    user_no: int,
    reference_no: int,
    reference_table: str,
    is_like: bool = True,
) -> dict[str, Any]:
    failure = validate_submission(
        repository.COLUMNS.create_rules(),
        {"user_no": user_no, "reference_table": reference_table, "reference_no": reference_no},
    )
    if failure is not None:
        raise failure

    user, _ = await asyncio.gather(
        users_service.get_user(user_no),
        _reference_lookup(reference_table, reference_no),
    )
    _ensure_can_like(user)

    like_no = await repository.table.upsert(
        {
            "user_no": user["user_no"],
            "reference_table": reference_table,
            "reference_no": reference_no,
            "is_active": bool(is_like),
        },
        conflict=repository.RELATION_KEY,
        update=("is_active",),
    )
    logger.info(
        "like_requested like_no=%s user_no=%s reference=%s:%s is_like=%s",
        like_no,
        user_no,
        reference_table,
        reference_no,
        bool(is_like),
    )
    return await get_like(like_no)


async def get_like_count(reference_no: int, reference_table: str) -> int:
    return await repository.table.count(
        {
            "reference_no": {"value": reference_no},
            "reference_table": {"value": reference_table},
            "is_active": {"value": True},
        }
    )


async def delete_like(like_no: int) -> bool:
    like = await get_like(like_no)
    await repository.table.delete(like["like_no"])
    return True


def sortable_columns() -> list[str]:
    return repository.table.sortable_columns()


def filter_conditions(key: str) -> list[str]:
    return [condition.value for condition in repository.table.filter_conditions(key)]
