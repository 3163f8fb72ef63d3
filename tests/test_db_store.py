"""
Store adapter tests against a stand-in asyncpg pool and connection.
"""

from contextlib import asynccontextmanager

import asyncpg
import pytest

from core import db


class StubConnection:
    def __init__(self, *, rows=None, error=None, commit_error=None):
        self.rows = rows or []
        self.error = error
        self.commit_error = commit_error
        self.events: list[str] = []

    async def fetchrow(self, sql, *args):
        if self.error is not None:
            raise self.error
        return self.rows[0] if self.rows else None

    async def fetch(self, sql, *args):
        if self.error is not None:
            raise self.error
        return self.rows

    async def execute(self, sql, *args):
        self.events.append("execute")
        if self.error is not None:
            raise self.error
        return "OK"

    @asynccontextmanager
    async def transaction(self):
        self.events.append("begin")
        try:
            yield
        except BaseException:
            self.events.append("rollback")
            raise
        if self.commit_error is not None:
            self.events.append("rollback")
            raise self.commit_error
        self.events.append("commit")


class StubPool(StubConnection):
    def __init__(self, conn: StubConnection, **kwargs):
        super().__init__(**kwargs)
        self.conn = conn
        self.acquired = 0
        self.released = 0

    @asynccontextmanager
    async def acquire(self):
        self.acquired += 1
        try:
            yield self.conn
        finally:
            self.released += 1


@pytest.mark.asyncio
async def test_rows_come_back_as_dicts():
    pool = StubPool(StubConnection(), rows=[{"id": 1, "name": "alice"}, {"id": 2, "name": "bob"}])
    store = db.Store(pool)

    one = await store.fetch_one("SELECT id, name FROM users WHERE id = $1", 1)
    many = await store.fetch_all("SELECT id, name FROM users")

    assert one == {"id": 1, "name": "alice"}
    assert type(one) is dict
    assert many == [{"id": 1, "name": "alice"}, {"id": 2, "name": "bob"}]
    assert await db.Store(StubPool(StubConnection())).fetch_one("SELECT 1") is None


@pytest.mark.asyncio
async def test_unique_violation_is_translated():
    pool = StubPool(StubConnection(), error=asyncpg.UniqueViolationError("duplicate key value"))
    store = db.Store(pool)

    with pytest.raises(db.UniqueViolation, match="duplicate key"):
        await store.fetch_one("INSERT INTO users (name) VALUES ($1) RETURNING id", "alice")
    with pytest.raises(db.UniqueViolation):
        await store.execute("UPDATE users SET name = $1 WHERE id = $2", "alice", 2)


@pytest.mark.asyncio
async def test_other_driver_errors_become_store_errors():
    store = db.Store(StubPool(StubConnection(), error=asyncpg.InterfaceError("connection is closed")))

    with pytest.raises(db.StoreError) as excinfo:
        await store.fetch_all("SELECT id FROM users")

    assert not isinstance(excinfo.value, db.UniqueViolation)
    assert isinstance(excinfo.value.__cause__, asyncpg.InterfaceError)


@pytest.mark.asyncio
async def test_transaction_commits_and_releases():
    conn = StubConnection()
    pool = StubPool(conn)

    async with db.Store(pool).transaction() as tx:
        assert isinstance(tx, db.Connection)
        await tx.execute("DELETE FROM contact_phone_numbers WHERE contact_id = $1", 1)

    assert conn.events == ["begin", "execute", "commit"]
    assert (pool.acquired, pool.released) == (1, 1)


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error_in_body():
    conn = StubConnection()
    pool = StubPool(conn)

    with pytest.raises(ValueError):
        async with db.Store(pool).transaction() as tx:
            await tx.execute("DELETE FROM contacts WHERE id = $1", 1)
            raise ValueError("boom")

    assert conn.events == ["begin", "execute", "rollback"]
    assert pool.released == 1


@pytest.mark.asyncio
async def test_statement_failure_inside_transaction_rolls_back():
    conn = StubConnection(error=asyncpg.UniqueViolationError("duplicate key value"))
    pool = StubPool(conn)

    with pytest.raises(db.UniqueViolation):
        async with db.Store(pool).transaction() as tx:
            await tx.execute("INSERT INTO users (name) VALUES ($1)", "alice")

    assert conn.events == ["begin", "execute", "rollback"]
    assert pool.released == 1


@pytest.mark.asyncio
async def test_commit_failure_is_translated():
    conn = StubConnection(commit_error=asyncpg.UniqueViolationError("deferred unique check"))
    pool = StubPool(conn)

    with pytest.raises(db.UniqueViolation):
        async with db.Store(pool).transaction():
            pass

    assert pool.released == 1
