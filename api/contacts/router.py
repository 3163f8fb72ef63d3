"""
Contact API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from auth import dependencies as auth_dependencies
from core import db

from . import schemas, service

router = APIRouter(prefix="/contacts")


@router.get("/users/{user_id}")
async def list_contacts(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    """
    Contacts of a user (emergency contacts first), each with its phone numbers.
    """
    result = await service.list_contacts(store, user_id, actor_id=actor_id, page=page, page_size=limit)
    return {"contacts": result.items, "pagination": result.pagination()}


@router.get("/{contact_id}")
async def get_contact(
    contact_id: int,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    return await service.get_contact(store, contact_id, actor_id=actor_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contact(
    request: schemas.ContactCreateRequest,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    return await service.create_contact(store, actor_id=actor_id, payload=request)


@router.put("/{contact_id}")
async def update_contact(
    contact_id: int,
    request: schemas.ContactUpdateRequest,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> dict:
    """
    Partial update. `phone_numbers` replaces the whole list when present
    (an empty list removes every number) and is left alone when omitted.
    """
    return await service.update_contact(store, contact_id, actor_id=actor_id, payload=request)


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(
    contact_id: int,
    actor_id: int = Depends(auth_dependencies.get_actor_id),
    store: db.Store = Depends(db.get_store),
) -> Response:
    await service.delete_contact(store, contact_id, actor_id=actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
