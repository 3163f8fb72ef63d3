"""
Contact business logic: thin wiring of request schemas onto the CRUD engine.
"""

from __future__ import annotations

from core import db
from crud import CrudEngine, Page

from . import schemas


def engine(store: db.Store) -> CrudEngine:
    return CrudEngine(store, schemas.CONTACTS)


async def list_contacts(store: db.Store, user_id: int, *, actor_id: int, page: int, page_size: int) -> Page:
    return await engine(store).list(user_id, actor_id, page=page, page_size=page_size)


async def get_contact(store: db.Store, contact_id: int, *, actor_id: int) -> dict:
    return await engine(store).read(contact_id, actor_id)


async def create_contact(store: db.Store, *, actor_id: int, payload: schemas.ContactCreateRequest) -> dict:
    values = payload.model_dump(exclude={"phone_numbers"})
    phones = [phone.model_dump() for phone in payload.phone_numbers]
    return await engine(store).create(actor_id, values, children=phones)


async def update_contact(
    store: db.Store,
    contact_id: int,
    *,
    actor_id: int,
    payload: schemas.ContactUpdateRequest,
) -> dict:
    return await engine(store).update(
        contact_id,
        actor_id,
        payload.field_values(),
        children=payload.phone_number_rows(),
    )


async def delete_contact(store: db.Store, contact_id: int, *, actor_id: int) -> None:
    await engine(store).delete(contact_id, actor_id)
