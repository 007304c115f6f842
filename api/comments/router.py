"""
Comment API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.schemas import ColumnsResponse, CountRequest, ListRequest

from . import repository, schemas, service

router = APIRouter()


@router.post("/comments")
async def create_comment(
    request: schemas.CreateCommentRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    submission = {**request.model_dump(), "user_no": current_user["user_no"]}
    return service.format_comment_to_html(await service.create_comment(submission))


@router.get("/comments/columns", response_model=ColumnsResponse)
async def get_comment_columns(
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {
        "sortable": service.sortable_columns(),
        "filters": repository.COLUMNS.filterable_columns(),
    }


@router.post("/comments/query")
async def list_comments(
    request: ListRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    result = await service.list_comments(**request.query_kwargs())
    result["data"] = [service.format_comment_to_html(comment) for comment in result["data"]]
    return result


@router.post("/comments/count")
async def count_comments(
    request: CountRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {"count": await service.count_comments(request.where)}


@router.get("/comments/{comment_no}")
async def get_comment(
    comment_no: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return service.format_comment_to_html(await service.get_comment(comment_no))


@router.delete("/comments/{comment_no}")
async def delete_comment(
    comment_no: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    deleted = await service.delete_comment(comment_no, acting_user_no=current_user["user_no"])
    return {"deleted": deleted}
