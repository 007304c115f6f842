"""
Like API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.schemas import ColumnsResponse, ListRequest

from . import repository, schemas, service

router = APIRouter()


@router.post("/likes/request")
async def like_request(
    request: schemas.LikeRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.like_request(
        current_user["user_no"],
        request.reference_no,
        request.reference_table,
        request.is_like,
    )


@router.get("/likes/columns", response_model=ColumnsResponse)
async def get_like_columns(
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {
        "sortable": service.sortable_columns(),
        "filters": repository.COLUMNS.filterable_columns(),
    }


@router.post("/likes/query")
async def list_likes(
    request: ListRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.list_likes(**request.query_kwargs())


@router.post("/likes/count")
async def count_likes(
    request: schemas.LikeCountRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {"count": await service.get_like_count(request.reference_no, request.reference_table)}


@router.get("/likes/{like_no}")
async def get_like(
    like_no: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.get_like(like_no)


@router.delete("/likes/{like_no}")
async def delete_like(
    like_no: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    like = await service.get_like(like_no)
    auth_dependencies.ensure_owner(current_user, like["user_no"])
    return {"deleted": await service.delete_like(like_no)}
