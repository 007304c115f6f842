"""
Post API endpoints.

The author of a new post is always the authenticated user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.schemas import ColumnsResponse, CountRequest, ListRequest

from . import repository, schemas, service

router = APIRouter()


@router.post("/posts")
async def create_post(
    request: schemas.CreatePostRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    submission = {**request.model_dump(), "user_no": current_user["user_no"]}
    return await service.create_post(submission)


@router.get("/posts/columns", response_model=ColumnsResponse)
async def get_post_columns(
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {
        "sortable": service.sortable_columns(),
        "filters": repository.COLUMNS.filterable_columns(),
    }


@router.get("/posts/search")
async def search_posts(
    q: str = Query(default="", max_length=2500),
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    rows = await service.search_posts(q)
    return {"data": rows, "count": len(rows)}


@router.post("/posts/query")
async def list_posts(
    request: ListRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.list_posts(**request.query_kwargs())


@router.post("/posts/count")
async def count_posts(
    request: CountRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {"count": await service.count_posts(request.where)}


@router.get("/posts/{post_no}")
async def get_post(
    post_no: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.get_post(post_no)


@router.patch("/posts/{post_no}")
async def update_post(
    post_no: int,
    request: schemas.UpdatePostRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.update_post(
        post_no,
        request.model_dump(),
        acting_user_no=current_user["user_no"],
    )


@router.delete("/posts/{post_no}")
async def delete_post(
    post_no: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    deleted = await service.delete_post(post_no, acting_user_no=current_user["user_no"])
    return {"deleted": deleted}
