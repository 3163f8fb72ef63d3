"""
Phone number API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from contacts.schemas import CONTACTS, PHONE_NUMBERS
from crud import ResourceSchema

# Owned through the parent contact: the guard joins contacts.user_id.
PHONE_NUMBER_RESOURCE = ResourceSchema(
    name="phone number",
    table=PHONE_NUMBERS.table,
    owner_column=PHONE_NUMBERS.parent_column,
    columns=PHONE_NUMBERS.columns,
    fields=PHONE_NUMBERS.value_columns,
    parent=CONTACTS,
)


def _strip_number(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("phone_number must not be blank")
    return value


class PhoneNumberCreateRequest(BaseModel):
    contact_id: int = Field(..., ge=1)
    phone_number: str = Field(..., min_length=1, max_length=32)

    @field_validator("phone_number")
    @classmethod
    def _strip(cls, value: str) -> str:
        return _strip_number(value)


class PhoneNumberUpdateRequest(BaseModel):
    phone_number: str | None = Field(default=None, min_length=1, max_length=32)

    @field_validator("phone_number")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return _strip_number(value)
