"""
Child collection persistence (e.g. a contact's phone numbers).
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from .schema import ChildSchema


async def insert_children(
    conn: Any,
    schema: ChildSchema,
    parent_id: int,
    children: Sequence[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """
    Insert rows one by one so every record comes back with its id, in input
    order.
    """
    columns = (schema.parent_column, *schema.value_columns)
    placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
    sql = (
        f"INSERT INTO {schema.table} ({', '.join(columns)}) "
        f"VALUES ({placeholders}) "
        f"RETURNING {schema.returning}"
    )

    inserted: list[dict[str, Any]] = []
    for child in children:
        row = await conn.fetch_one(sql, parent_id, *(child.get(col) for col in schema.value_columns))
        if row is None:
            raise RuntimeError(f"Failed to insert into {schema.table}.")
        inserted.append(row)
    return inserted


async def replace_children(
    conn: Any,
    schema: ChildSchema,
    parent_id: int,
    children: Sequence[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """
    Delete every child of `parent_id` and insert `children` in their place.

    Must run on a transaction handle. An empty `children` clears the
    collection; callers that want to keep it must not call this at all.
    """
    await conn.execute(
        f"DELETE FROM {schema.table} WHERE {schema.parent_column} = $1",
        parent_id,
    )
    if not children:
        return []
    return await insert_children(conn, schema, parent_id, children)


async def load_children(executor: Any, schema: ChildSchema, parent_id: int) -> list[dict[str, Any]]:
    return await executor.fetch_all(
        f"SELECT {schema.returning} FROM {schema.table} "
        f"WHERE {schema.parent_column} = $1 "
        f"ORDER BY id ASC",
        parent_id,
    )


async def load_children_batch(
    executor: Any,
    schema: ChildSchema,
    parent_ids: Sequence[int],
) -> dict[int, list[dict[str, Any]]]:
    """
    Fetch the children of many parents in one query, grouped by parent id.
    """
    grouped: dict[int, list[dict[str, Any]]] = {int(pid): [] for pid in parent_ids}
    if not grouped:
        return grouped

    rows = await executor.fetch_all(
        f"SELECT {schema.returning} FROM {schema.table} "
        f"WHERE {schema.parent_column} = ANY($1::bigint[]) "
        f"ORDER BY {schema.parent_column} ASC, id ASC",
        list(grouped),
    )
    for row in rows:
        grouped.setdefault(int(row[schema.parent_column]), []).append(row)
    return grouped
