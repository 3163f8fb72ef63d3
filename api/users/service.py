"""
User profile business logic.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from auth import security
from core import db
from crud import CrudEngine, NotFound, Page
from crud.pagination import page_offset

from . import repository, schemas


def engine(store: db.Store) -> CrudEngine:
    return CrudEngine(store, schemas.USERS)


async def list_users(store: db.Store, *, page: int, page_size: int) -> Page:
    total = await repository.count_users(store)
    rows = await repository.list_users(store, limit=page_size, offset=page_offset(page, page_size))
    return Page(items=rows, total=total, page=page, page_size=page_size)


async def get_user(store: db.Store, user_id: int) -> dict:
    row = await repository.get_user_by_id(store, user_id)
    if row is None:
        raise NotFound("user", user_id)
    return row


async def update_user(
    store: db.Store,
    user_id: int,
    *,
    actor_id: int,
    payload: schemas.UserUpdateRequest,
) -> dict:
    values = payload.model_dump(exclude_unset=True)
    password = values.pop("password", None)
    if password:
        values["password_hash"] = security.hash_password(password)

    try:
        return await engine(store).update(user_id, actor_id, values)
    except db.UniqueViolation as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User name is already taken.",
        ) from exc


async def delete_user(store: db.Store, user_id: int, *, actor_id: int) -> None:
    # Contacts and their phone numbers are removed by ON DELETE CASCADE.
    await engine(store).delete(user_id, actor_id)
