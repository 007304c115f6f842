"""
Comment business logic.

A comment needs an active author, a post that still exists and, for replies,
an existing parent comment. Those lookups run concurrently through the
sibling services; their Not Found / Forbidden failures propagate as-is.

Bodies are sanitized down to paragraphs and stored as markdown; readers get
them back rendered as HTML (`format_comment_to_html`).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import markdown
import nh3
from markdownify import markdownify

from core import errors
from core.query import OrderBy, merge_where
from core.validation import clean_values, validate_submission
from posts import service as posts_service
from users import service as users_service

from . import repository

logger = logging.getLogger(__name__)

COUNT_WHERE = {"is_deleted": {"value": False}}
CREATE_KEYS = ("user_no", "post_no", "parent_comment_no", "body")
BODY_TAGS = {"p"}


def format_comment_body(body: Any) -> str:
    """
    Strip every tag but <p> (and all attributes), then convert to markdown.
    """
    if not isinstance(body, str) or body.strip() == "":
        raise errors.BadRequestError("Unable to sanitize an invalid comment body")

    clean_html = nh3.clean(body.strip(), tags=BODY_TAGS, attributes={})
    formatted = markdownify(clean_html, escape_misc=False).strip()
    if not formatted:
        raise errors.BadRequestError("Unable to sanitize an invalid comment body")
    return formatted


def format_comment_to_html(comment: dict[str, Any]) -> dict[str, Any]:
    return {**comment, "body": markdown.markdown(comment.get("body") or "")}


async def _no_parent() -> None:
    return None


async def create_comment(submission: dict[str, Any]) -> dict[str, Any]:
    failure = validate_submission(repository.COLUMNS.create_rules(), submission)
    if failure is not None:
        raise failure
    body = format_comment_body(submission["body"])

    parent_comment_no = submission.get("parent_comment_no")
    user, post, _ = await asyncio.gather(
        users_service.get_user(submission["user_no"]),
        posts_service.get_post(submission["post_no"]),
        get_comment(parent_comment_no) if parent_comment_no is not None else _no_parent(),
    )

    if user["is_deleted"] or user["is_banned"]:
        raise errors.ForbiddenError(
            f"User (user_no: {user['user_no']}) does not have access to create a comment"
        )
    if post["is_deleted"]:
        raise errors.ForbiddenError(f"Post with a post_no of {post['post_no']} has been deleted")

    values = clean_values(submission, CREATE_KEYS)
    values["body"] = body
    comment_no = await repository.table.insert(values)
    logger.info("comment_created comment_no=%s post_no=%s", comment_no, post["post_no"])
    return await get_comment(comment_no)


async def get_comment(comment_no: int) -> dict[str, Any]:
    return await repository.table.get(comment_no)


async def list_comments(
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


async def count_comments(where: dict[str, Any] | None = None) -> int:
    return await repository.table.count(merge_where(COUNT_WHERE, where))


async def delete_comment(comment_no: int, *, acting_user_no: int | None = None) -> bool:
    comment = await get_comment(comment_no)
    if acting_user_no is not None and comment["user_no"] != acting_user_no:
        raise errors.ForbiddenError(
            f"User (user_no: {acting_user_no}) does not have access to comment (comment_no: {comment_no})"
        )
    await repository.table.update(comment_no, {"is_deleted": True})
    await get_comment(comment_no)
    logger.info("comment_deleted comment_no=%s", comment_no)
    return True


def sortable_columns() -> list[str]:
    return repository.table.sortable_columns()


def filter_conditions(key: str) -> list[str]:
    return [condition.value for condition in repository.table.filter_conditions(key)]
