"""
User persistence helpers.
"""

from __future__ import annotations

from typing import Any

from core import db

USER_COLUMNS = "id, name, age, mac, phone_number, image, created_at, updated_at"
USER_COLUMNS_WITH_HASH = f"{USER_COLUMNS}, password_hash"


async def create_user(
    store: db.Store,
    *,
    name: str,
    password_hash: str,
    phone_number: str,
    age: int | None = None,
    mac: str | None = None,
    image: str | None = None,
) -> dict[str, Any]:
    row = await store.fetch_one(
        f"""
        INSERT INTO users (name, password_hash, age, mac, phone_number, image)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING {USER_COLUMNS}
        """,
        name,
        password_hash,
        age,
        mac,
        phone_number,
        image,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_name(store: db.Store, name: str) -> dict[str, Any] | None:
    return await store.fetch_one(
        f"""
        SELECT {USER_COLUMNS_WITH_HASH}
        FROM users
        WHERE name = $1
        """,
        (name or "").strip(),
    )


async def get_user_by_id(store: db.Store, user_id: int) -> dict[str, Any] | None:
    return await store.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def get_user_by_phone(store: db.Store, phone_number: str) -> dict[str, Any] | None:
    return await store.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE phone_number = $1
        """,
        (phone_number or "").strip(),
    )


async def set_password_hash(store: Any, user_id: int, password_hash: str) -> bool:
    row = await store.fetch_one(
        """
        UPDATE users
        SET password_hash = $1, updated_at = now()
        WHERE id = $2
        RETURNING id
        """,
        password_hash,
        user_id,
    )
    return row is not None


async def count_users(store: db.Store) -> int:
    row = await store.fetch_one("SELECT count(*) AS n FROM users")
    return int((row or {}).get("n", 0))


async def list_users(store: db.Store, *, limit: int, offset: int) -> list[dict[str, Any]]:
    return await store.fetch_all(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        ORDER BY created_at DESC, id DESC
        LIMIT $1
        OFFSET $2
        """,
        limit,
        offset,
    )
