"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from auth import dependencies as auth_dependencies
from core import db

from . import schemas, service

router = APIRouter(prefix="/users")


@router.get("/all")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: db.Store = Depends(db.get_store),
) -> dict:
    result = await service.list_users(store, page=page, page_size=limit)
    return {"users": result.items, "pagination": result.pagination()}


@router.get("/me")
async def get_me(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return current_user


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    _: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    return await service.get_user(store, user_id)


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    request: schemas.UserUpdateRequest,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    return await service.update_user(store, user_id, actor_id=actor_id, payload=request)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> Response:
    await service.delete_user(store, user_id, actor_id=actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
