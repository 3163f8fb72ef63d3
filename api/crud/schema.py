"""
Resource descriptions consumed by the CRUD engine.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChildSchema:
    """
    A collection of rows owned by one parent row, replaced wholesale.

    e.g. contact_phone_numbers(id, contact_id, phone_number)
    """

    table: str
    parent_column: str
    value_columns: tuple[str, ...]
    columns: tuple[str, ...]

    @property
    def returning(self) -> str:
        return ", ".join(self.columns)


@dataclass(frozen=True)
class ResourceSchema:
    """
    `owner_column` links a row to its owner. For top-level resources it holds
    a user id (`users.id` is its own owner). When `parent` is set the column
    holds the parent's id instead, and ownership is resolved through the
    parent's own `owner_column`.

    `fields` is the declaration order used for inserts and updates, which
    keeps generated placeholders deterministic.
    """

    name: str
    table: str
    owner_column: str
    columns: tuple[str, ...]
    fields: tuple[str, ...]
    order_by: tuple[str, ...] = ("id ASC",)
    children: ChildSchema | None = None
    children_key: str = "children"
    parent: ResourceSchema | None = None
    touch_column: str | None = None

    @property
    def returning(self) -> str:
        return ", ".join(self.columns)

    @property
    def order_clause(self) -> str:
        return ", ".join(self.order_by)

    def owner_query(self) -> str:
        if self.parent is None:
            return f"SELECT {self.owner_column} AS owner_id FROM {self.table} WHERE id = $1"
        return (
            f"SELECT p.{self.parent.owner_column} AS owner_id "
            f"FROM {self.table} c "
            f"JOIN {self.parent.table} p ON p.id = c.{self.owner_column} "
            f"WHERE c.id = $1"
        )
