"""
User API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from crud import ResourceSchema

from .repository import USER_COLUMNS

# A user owns itself: the guard compares users.id with the actor id.
USERS = ResourceSchema(
    name="user",
    table="users",
    owner_column="id",
    columns=tuple(col.strip() for col in USER_COLUMNS.split(",")),
    fields=("name", "password_hash", "age", "mac", "phone_number", "image"),
    order_by=("created_at DESC", "id DESC"),
    touch_column="updated_at",
)


class UserUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    password: str | None = Field(default=None, min_length=6, max_length=128)
    age: int | None = Field(default=None, ge=1)
    mac: str | None = Field(default=None, pattern=r"^([0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}$")
    phone_number: str | None = Field(default=None, min_length=3, max_length=32)
    image: str | None = Field(default=None, max_length=2048)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value
