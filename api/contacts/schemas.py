"""
Contact API schemas and the contact resource description.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from crud import ChildSchema, ResourceSchema

PHONE_NUMBERS = ChildSchema(
    table="contact_phone_numbers",
    parent_column="contact_id",
    value_columns=("phone_number",),
    columns=("id", "contact_id", "phone_number"),
)

CONTACTS = ResourceSchema(
    name="contact",
    table="contacts",
    owner_column="user_id",
    columns=("id", "user_id", "name", "is_emergency", "relationship", "image", "created_at", "updated_at"),
    fields=("name", "is_emergency", "relationship", "image"),
    order_by=("is_emergency DESC", "name ASC", "id ASC"),
    children=PHONE_NUMBERS,
    children_key="phone_numbers",
    touch_column="updated_at",
)


class PhoneNumberInput(BaseModel):
    phone_number: str = Field(..., min_length=1, max_length=32)

    @field_validator("phone_number")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("phone_number must not be blank")
        return value


def _coerce_phone_numbers(value: Any) -> Any:
    # Accept ["555-0100"] as shorthand for [{"phone_number": "555-0100"}].
    if isinstance(value, list):
        return [{"phone_number": item} if isinstance(item, str) else item for item in value]
    return value


class ContactCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    is_emergency: bool = False
    relationship: str | None = Field(default=None, max_length=100)
    image: str | None = Field(default=None, max_length=2048)
    phone_numbers: list[PhoneNumberInput] = Field(default_factory=list)

    @field_validator("phone_numbers", mode="before")
    @classmethod
    def _coerce_phones(cls, value: Any) -> Any:
        return _coerce_phone_numbers(value)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class ContactUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    is_emergency: bool | None = None
    relationship: str | None = Field(default=None, max_length=100)
    image: str | None = Field(default=None, max_length=2048)
    # None (or absent) keeps the current numbers, [] removes them all.
    phone_numbers: list[PhoneNumberInput] | None = None

    @field_validator("phone_numbers", mode="before")
    @classmethod
    def _coerce_phones(cls, value: Any) -> Any:
        return _coerce_phone_numbers(value)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value

    def field_values(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"phone_numbers"})

    def phone_number_rows(self) -> list[dict[str, Any]] | None:
        if self.phone_numbers is None:
            return None
        return [phone.model_dump() for phone in self.phone_numbers]
