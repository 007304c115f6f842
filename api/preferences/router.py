"""
User preference API endpoints, keyed by user number.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.schemas import ColumnsResponse, CountRequest, ListRequest

from . import repository, schemas, service

router = APIRouter()


@router.post("/preferences")
async def create_user_preference(
    request: schemas.UserPreferenceRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    submission = {**request.model_dump(), "user_no": current_user["user_no"]}
    return await service.create_user_preference(submission)


@router.get("/preferences/columns", response_model=ColumnsResponse)
async def get_user_preference_columns(
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {
        "sortable": service.sortable_columns(),
        "filters": repository.COLUMNS.filterable_columns(),
    }


@router.post("/preferences/query")
async def list_user_preferences(
    request: ListRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.list_user_preferences(**request.query_kwargs())


@router.post("/preferences/count")
async def count_user_preferences(
    request: CountRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {"count": await service.count_user_preferences(request.where)}


@router.get("/preferences/{user_no}")
async def get_user_preference(
    user_no: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    auth_dependencies.ensure_owner(current_user, user_no)
    return await service.get_user_preference(user_no)


@router.patch("/preferences/{user_no}")
async def update_user_preference(
    user_no: int,
    request: schemas.UserPreferenceRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    auth_dependencies.ensure_owner(current_user, user_no)
    return await service.update_user_preference(user_no, request.model_dump())


@router.delete("/preferences/{user_no}")
async def delete_user_preference(
    user_no: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    auth_dependencies.ensure_owner(current_user, user_no)
    return {"deleted": await service.delete_user_preference(user_no)}
