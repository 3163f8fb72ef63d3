from __future__ import annotations

from core import db
from crud import CrudEngine, Page

from . import schemas


def engine(store: db.Store) -> CrudEngine:
    return CrudEngine(store, schemas.PHONE_NUMBER_RESOURCE)


async def list_for_contact(store: db.Store, contact_id: int, *, actor_id: int, page: int, page_size: int) -> Page:
    return await engine(store).list(contact_id, actor_id, page=page, page_size=page_size)


async def get_phone_number(store: db.Store, phone_id: int, *, actor_id: int) -> dict:
    return await engine(store).read(phone_id, actor_id)


async def add_phone_number(store: db.Store, *, actor_id: int, payload: schemas.PhoneNumberCreateRequest) -> dict:
    return await engine(store).create(
        actor_id,
        {"phone_number": payload.phone_number},
        parent_id=payload.contact_id,
    )


async def update_phone_number(
    store: db.Store,
    phone_id: int,
    *,
    actor_id: int,
    payload: schemas.PhoneNumberUpdateRequest,
) -> dict:
    return await engine(store).update(phone_id, actor_id, payload.model_dump(exclude_unset=True))


async def delete_phone_number(store: db.Store, phone_id: int, *, actor_id: int) -> None:
    await engine(store).delete(phone_id, actor_id)
