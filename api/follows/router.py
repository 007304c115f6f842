"""
Follow API endpoints.

The follower is always the authenticated user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.schemas import ColumnsResponse, ListRequest

from . import repository, schemas, service

router = APIRouter()


@router.post("/follows/request")
async def follow_request(
    request: schemas.FollowRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.follow_request(current_user["user_no"], request.user_no, request.should_follow)


@router.get("/follows/columns", response_model=ColumnsResponse)
async def get_follow_columns(
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {
        "sortable": service.sortable_columns(),
        "filters": repository.COLUMNS.filterable_columns(),
    }


@router.post("/follows/query")
async def list_follows(
    request: ListRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.list_follows(**request.query_kwargs())


@router.get("/follows/counts/{user_no}")
async def get_follow_counts(
    user_no: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {
        "follower_count": await service.get_follower_count(user_no),
        "following_count": await service.get_following_count(user_no),
    }


@router.get("/follows/{follow_no}")
async def get_follow(
    follow_no: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.get_follow(follow_no)


@router.patch("/follows/{follow_no}")
async def update_follow(
    follow_no: int,
    request: schemas.UpdateFollowRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    follow = await service.get_follow(follow_no)
    auth_dependencies.ensure_owner(current_user, follow["follower_user_no"])
    return await service.update_follow(follow_no, request.model_dump())


@router.delete("/follows/{follow_no}")
async def delete_follow(
    follow_no: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    follow = await service.get_follow(follow_no)
    auth_dependencies.ensure_owner(current_user, follow["follower_user_no"])
    return {"deleted": await service.delete_follow(follow_no)}
