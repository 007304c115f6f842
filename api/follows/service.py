"""
Follow business logic.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from core import errors
from core.query import OrderBy
from core.tables import NOW
from core.validation import clean_values, validate_submission
from users import service as users_service

from . import repository

logger = logging.getLogger(__name__)


def _state_values(is_following: bool) -> dict[str, Any]:
    if is_following:
        return {"is_following": True, "follow_date": NOW}
    return {"is_following": False, "unfollow_date": NOW}


def _ensure_can_follow(user: dict[str, Any]) -> None:
    if user["is_deleted"]:
        raise errors.ForbiddenError(
            f"User (user_no: {user['user_no']}) has been deleted and cannot be updated"
        )
    if user["is_banned"]:
        raise errors.ForbiddenError(
            f"User (user_no: {user['user_no']}) has been banned and cannot be updated"
        )


async def create_follow(submission: dict[str, Any]) -> dict[str, Any]:
    failure = validate_submission(repository.COLUMNS.create_rules(), submission)
    if failure is not None:
        raise failure

    values = clean_values(submission, repository.RELATION_KEY)
    # New rows start out following; follow_date has no column default.
    follow_no = await repository.table.insert({**values, "follow_date": NOW})
    logger.info("follow_created follow_no=%s", follow_no)
    return await get_follow(follow_no)


async def update_follow(follow_no: int, submission: dict[str, Any]) -> dict[str, Any]:
    repository.table.validate_record_no(follow_no)
    failure = validate_submission(repository.COLUMNS.update_rules(), submission)
    if failure is not None:
        raise failure

    await get_follow(follow_no)
    values: dict[str, Any] = {}
    if "is_following" in submission:
        values = _state_values(bool(submission["is_following"]))
    await repository.table.update(follow_no, values)
    return await get_follow(follow_no)


async def follow_request(
    follower_user_no: int,
    user_no: int,
    should_follow: bool = True,
) -> dict[str, Any]:
    follower, followed = await asyncio.gather(
        users_service.get_user(follower_user_no),
        users_service.get_user(user_no),
    )
    for user in (follower, followed):
        _ensure_can_follow(user)

    state = _state_values(should_follow)
    follow_no = await repository.table.upsert(
        {"user_no": followed["user_no"], "follower_user_no": follower["user_no"], **state},
        conflict=repository.RELATION_KEY,
        update=tuple(state),
    )
    logger.info(
        "follow_requested follow_no=%s follower_user_no=%s user_no=%s should_follow=%s",
        follow_no,
        follower_user_no,
        user_no,
        should_follow,
    )
    return await get_follow(follow_no)


async def get_follow(follow_no: int) -> dict[str, Any]:
    return await repository.table.get(follow_no)


async def list_follows(
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


async def get_follower_count(user_no: int) -> int:
    repository.table.validate_record_no(user_no, "user_no")
    return await repository.table.count({"is_following": {"value": True}, "user_no": {"value": user_no}})


async def get_following_count(user_no: int) -> int:
    repository.table.validate_record_no(user_no, "user_no")
    return await repository.table.count(
        {"is_following": {"value": True}, "follower_user_no": {"value": user_no}}
    )


async def delete_follow(follow_no: int) -> bool:
    follow = await get_follow(follow_no)
    await repository.table.delete(follow["follow_no"])
    return True


def sortable_columns() -> list[str]:
    return repository.table.sortable_columns()


def filter_conditions(key: str) -> list[str]:
    return [condition.value for condition in repository.table.filter_conditions(key)]
