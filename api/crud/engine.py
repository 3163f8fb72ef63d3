"""
Transactional CRUD engine.

Every mutation follows the same sequence:
1. ownership guard (one read, outside the transaction)
2. one transaction holding the parent write and, when supplied, the child
   collection replacement
3. any failure rolls the whole aggregate back and propagates to the caller

Children arguments use replacement semantics: `None` leaves the collection
alone, `[]` clears it.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Sequence

from . import children as child_rows
from .errors import Forbidden, NoFieldsProvided, NotFound, NothingToUpdate
from .guard import require_ownership
from .pagination import Page, page_offset
from .schema import ResourceSchema
from .updates import UpdateClause, build_update

logger = logging.getLogger(__name__)

ChildInput = Mapping[str, Any]


class CrudEngine:
    def __init__(self, store: Any, schema: ResourceSchema) -> None:
        self._store = store
        self._schema = schema

    @property
    def schema(self) -> ResourceSchema:
        return self._schema

    @asynccontextmanager
    async def _transaction(self, op: str) -> AsyncIterator[Any]:
        try:
            async with self._store.transaction() as conn:
                yield conn
        except Exception:
            logger.warning("crud_rollback resource=%s op=%s", self._schema.name, op)
            raise

    def _check_children_arg(self, children: Sequence[ChildInput] | None) -> None:
        if children is not None and self._schema.children is None:
            raise ValueError(f"{self._schema.name} has no child collection.")

    def _select_by_id(self) -> str:
        return f"SELECT {self._schema.returning} FROM {self._schema.table} WHERE id = $1"

    async def guard(self, resource_id: int, actor_id: int) -> None:
        await require_ownership(self._store, self._schema, resource_id, actor_id)

    async def create(
        self,
        actor_id: int,
        values: Mapping[str, Any],
        *,
        children: Sequence[ChildInput] | None = None,
        parent_id: int | None = None,
    ) -> dict[str, Any]:
        """
        Insert a row owned by `actor_id` (or by `parent_id` for resources that
        hang off a parent row) together with its children.
        """
        schema = self._schema
        self._check_children_arg(children)
        unknown = set(values) - set(schema.fields)
        if unknown:
            raise ValueError(f"Unknown {schema.name} fields: {sorted(unknown)}")

        owner_value = actor_id
        if schema.parent is not None:
            if parent_id is None:
                raise ValueError(f"{schema.name} needs a parent id.")
            await require_ownership(self._store, schema.parent, parent_id, actor_id)
            owner_value = parent_id

        insert_values = {name: values[name] for name in schema.fields if values.get(name) is not None}
        columns = (schema.owner_column, *insert_values)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        sql = (
            f"INSERT INTO {schema.table} ({', '.join(columns)}) "
            f"VALUES ({placeholders}) "
            f"RETURNING {schema.returning}"
        )

        async with self._transaction("create") as conn:
            row = await conn.fetch_one(sql, owner_value, *insert_values.values())
            if row is None:
                raise RuntimeError(f"Failed to insert {schema.name}.")
            if schema.children is not None:
                # A fresh parent has no children, so there is nothing to delete.
                row[schema.children_key] = (
                    await child_rows.insert_children(conn, schema.children, int(row["id"]), children)
                    if children
                    else []
                )

        logger.info("%s_created id=%s owner=%s", schema.name, row["id"], owner_value)
        return row

    async def read(self, resource_id: int, actor_id: int) -> dict[str, Any]:
        schema = self._schema
        await self.guard(resource_id, actor_id)

        row = await self._store.fetch_one(self._select_by_id(), resource_id)
        if row is None:
            raise NotFound(schema.name, resource_id)
        if schema.children is not None:
            row[schema.children_key] = await child_rows.load_children(self._store, schema.children, resource_id)
        return row

    async def update(
        self,
        resource_id: int,
        actor_id: int,
        values: Mapping[str, Any],
        *,
        children: Sequence[ChildInput] | None = None,
    ) -> dict[str, Any]:
        schema = self._schema
        self._check_children_arg(children)
        await self.guard(resource_id, actor_id)

        try:
            clause = build_update(values, schema.fields)
        except NoFieldsProvided:
            if children is None:
                raise NothingToUpdate() from None
            clause = UpdateClause()

        extra = (f"{schema.touch_column} = now()",) if schema.touch_column else ()
        set_clause = clause.set_clause(*extra)

        async with self._transaction("update") as conn:
            if set_clause:
                row = await conn.fetch_one(
                    f"UPDATE {schema.table} SET {set_clause} "
                    f"WHERE id = ${clause.next_placeholder} "
                    f"RETURNING {schema.returning}",
                    *clause.params,
                    resource_id,
                )
            else:
                row = await conn.fetch_one(self._select_by_id(), resource_id)
            if row is None:
                raise NotFound(schema.name, resource_id)

            if schema.children is not None:
                if children is not None:
                    row[schema.children_key] = await child_rows.replace_children(
                        conn, schema.children, resource_id, children
                    )
                else:
                    row[schema.children_key] = await child_rows.load_children(conn, schema.children, resource_id)

        logger.info("%s_updated id=%s fields=%s", schema.name, resource_id, len(clause.assignments))
        return row

    async def delete(self, resource_id: int, actor_id: int) -> None:
        schema = self._schema
        await self.guard(resource_id, actor_id)

        async with self._transaction("delete") as conn:
            if schema.children is not None:
                await conn.execute(
                    f"DELETE FROM {schema.children.table} WHERE {schema.children.parent_column} = $1",
                    resource_id,
                )
            await conn.execute(f"DELETE FROM {schema.table} WHERE id = $1", resource_id)

        logger.info("%s_deleted id=%s", schema.name, resource_id)

    async def list(
        self,
        owner_id: int,
        actor_id: int,
        *,
        page: int = 1,
        page_size: int = 10,
        batched: bool = True,
    ) -> Page:
        """
        One page of the rows owned by `owner_id`, children attached.

        `batched=False` loads children with one query per row; only worth it
        for very small pages.
        """
        schema = self._schema
        offset = page_offset(page, page_size)

        if schema.parent is not None:
            await require_ownership(self._store, schema.parent, owner_id, actor_id)
        elif int(owner_id) != int(actor_id):
            raise Forbidden(schema.name, owner_id)

        count_row = await self._store.fetch_one(
            f"SELECT count(*) AS n FROM {schema.table} WHERE {schema.owner_column} = $1",
            owner_id,
        )
        total = int((count_row or {}).get("n", 0))

        rows = await self._store.fetch_all(
            f"SELECT {schema.returning} FROM {schema.table} "
            f"WHERE {schema.owner_column} = $1 "
            f"ORDER BY {schema.order_clause} "
            f"LIMIT $2 OFFSET $3",
            owner_id,
            page_size,
            offset,
        )

        if schema.children is not None and rows:
            if batched:
                grouped = await child_rows.load_children_batch(
                    self._store, schema.children, [int(row["id"]) for row in rows]
                )
                for row in rows:
                    row[schema.children_key] = grouped.get(int(row["id"]), [])
            else:
                for row in rows:
                    row[schema.children_key] = await child_rows.load_children(
                        self._store, schema.children, int(row["id"])
                    )

        return Page(items=rows, total=total, page=page, page_size=page_size)
