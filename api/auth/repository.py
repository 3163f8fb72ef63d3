"""
Password reset code persistence.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from core import db


async def insert_reset_code(store: db.Store, *, phone_number: str, code: str, expires_at: datetime) -> None:
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)

    await store.execute(
        """
        INSERT INTO password_reset_codes (phone_number, code, expires_at)
        VALUES ($1, $2, $3)
        """,
        phone_number,
        code,
        expires_at,
    )


async def list_reset_codes(store: Any, phone_number: str) -> list[dict[str, Any]]:
    """
    All codes issued for a phone number, newest expiry first. Matching and
    expiry checks happen in the service so the comparison is constant-time.
    """
    return await store.fetch_all(
        """
        SELECT phone_number, code, expires_at
        FROM password_reset_codes
        WHERE phone_number = $1
        ORDER BY expires_at DESC
        """,
        phone_number,
    )


async def delete_reset_codes(store: Any, phone_number: str) -> None:
    await store.execute(
        """
        DELETE FROM password_reset_codes
        WHERE phone_number = $1
        """,
        phone_number,
    )
