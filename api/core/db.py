"""
Async database access (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`). Routes never touch the pool
directly: they receive a `Store` through the `get_store` dependency, which
tests override with an in-memory double.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import config

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


class StoreError(RuntimeError):
    """A query or transaction failed inside the database driver."""


class UniqueViolation(StoreError):
    pass


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = config.env_str("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=config.env_int("DB_POOL_MIN_SIZE", 1),
        max_size=config.env_int("DB_POOL_MAX_SIZE", 5),
        command_timeout=config.env_int("DB_COMMAND_TIMEOUT", 30),
    )
    logger.info("db_pool_ready max_size=%s", _pool.get_max_size())


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def _translate(exc: Exception) -> StoreError:
    if isinstance(exc, asyncpg.UniqueViolationError):
        return UniqueViolation(str(exc))
    return StoreError(str(exc))


class _Executor:
    """
    Shared query methods. `_target` is either the pool (one connection per
    call) or a connection held for the length of a transaction.
    """

    _target: Any

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        try:
            row = await self._target.fetchrow(sql, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            raise _translate(exc) from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        try:
            rows = await self._target.fetch(sql, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            raise _translate(exc) from exc
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
        """
        try:
            await self._target.execute(sql, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            raise _translate(exc) from exc


class Connection(_Executor):
    """Handle given to the body of `Store.transaction()`."""

    def __init__(self, conn: asyncpg.Connection) -> None:
        self._target = conn


class Store(_Executor):
    def __init__(self, db_pool: asyncpg.Pool) -> None:
        self._target = db_pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Connection]:
        """
        Hold one pooled connection for a single transaction.

        Commits when the body finishes, rolls back on any exception
        (cancellation included) and always releases the connection.
        """
        try:
            async with self._target.acquire() as conn:  # type: asyncpg.Connection
                async with conn.transaction():
                    yield Connection(conn)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            raise _translate(exc) from exc


def get_store() -> Store:
    return Store(pool())
