"""
Phone number API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from auth import dependencies as auth_dependencies
from core import db

from . import schemas, service

router = APIRouter(prefix="/phone-numbers")


@router.get("/contact/{contact_id}")
async def list_phone_numbers(
    contact_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    result = await service.list_for_contact(store, contact_id, actor_id=actor_id, page=page, page_size=limit)
    return {"phone_numbers": result.items, "pagination": result.pagination()}


@router.get("/{phone_id}")
async def get_phone_number(
    phone_id: int,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    return await service.get_phone_number(store, phone_id, actor_id=actor_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_phone_number(
    request: schemas.PhoneNumberCreateRequest,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    return await service.add_phone_number(store, actor_id=actor_id, payload=request)


@router.put("/{phone_id}")
async def update_phone_number(
    phone_id: int,
    request: schemas.PhoneNumberUpdateRequest,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    return await service.update_phone_number(store, phone_id, actor_id=actor_id, payload=request)


@router.delete("/{phone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_phone_number(
    phone_id: int,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> Response:
    await service.delete_phone_number(store, phone_id, actor_id=actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
