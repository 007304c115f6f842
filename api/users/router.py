"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.schemas import ColumnsResponse, CountRequest, ListRequest

from . import repository, schemas, service

router = APIRouter()


@router.post("/users")
async def create_user(request: schemas.CreateUserRequest) -> dict:
    return await service.create_user(request.model_dump())


@router.get("/users/columns", response_model=ColumnsResponse)
async def get_user_columns(
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {
        "sortable": service.sortable_columns(),
        "filters": repository.COLUMNS.filterable_columns(),
    }


@router.get("/users/search")
async def search_users(
    q: str = Query(default="", max_length=255),
    columns: list[str] | None = Query(default=None),
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    rows = await service.search_users(q, columns)
    return {"data": rows, "count": len(rows)}


@router.post("/users/query")
async def list_users(
    request: ListRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.list_users(**request.query_kwargs())


@router.post("/users/count")
async def count_users(
    request: CountRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {"count": await service.count_users(request.where)}


@router.get("/users/{user_no}")
async def get_user(
    user_no: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.get_user(user_no)


@router.patch("/users/{user_no}")
async def update_user(
    user_no: int,
    request: schemas.UpdateUserRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    auth_dependencies.ensure_owner(current_user, user_no)
    return await service.update_user(user_no, request.model_dump())


@router.delete("/users/{user_no}")
async def delete_user(
    user_no: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    auth_dependencies.ensure_owner(current_user, user_no)
    return {"deleted": await service.delete_user(user_no)}


@router.put("/users/{user_no}/password")
async def update_password(
    user_no: int,
    request: schemas.UpdatePasswordRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    auth_dependencies.ensure_owner(current_user, user_no)
    return await service.update_password(
        user_no,
        request.current_password,
        request.new_password,
        request.confirm_new_password,
    )
