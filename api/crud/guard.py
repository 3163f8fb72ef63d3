"""
Ownership guard: one read deciding whether an actor may touch a row.
"""

from __future__ import annotations

import enum
from typing import Any

from .errors import Forbidden, NotFound
from .schema import ResourceSchema


class Verdict(enum.Enum):
    AUTHORIZED = "authorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


async def check_ownership(executor: Any, schema: ResourceSchema, resource_id: int, actor_id: int) -> Verdict:
    # Never cached: ownership can change between requests.
    row = await executor.fetch_one(schema.owner_query(), resource_id)
    if row is None:
        return Verdict.NOT_FOUND
    if int(row["owner_id"]) != int(actor_id):
        return Verdict.FORBIDDEN
    return Verdict.AUTHORIZED


async def require_ownership(executor: Any, schema: ResourceSchema, resource_id: int, actor_id: int) -> None:
    verdict = await check_ownership(executor, schema, resource_id, actor_id)
    if verdict is Verdict.NOT_FOUND:
        raise NotFound(schema.name, resource_id)
    if verdict is Verdict.FORBIDDEN:
        raise Forbidden(schema.name, resource_id)
