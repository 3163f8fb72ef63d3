"""
Shared pytest fixtures.

PostgreSQL is replaced by `FakeStore`, an in-memory double that honours the
store contract (`fetch_one` / `fetch_all` / `execute` / `transaction()`)
for the statement shapes this API issues. Transactions snapshot the tables
and restore them on error, so rollback behaviour is observable.
"""

import copy
import os
import re
import tempfile
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings BEFORE any app imports.
os.environ["JWT_SECRET"] = "test-secret-not-real-but-long-enough-for-hs256"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="contact_book_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SMS_GATEWAY_URL"] = ""

from auth import security  # noqa: E402
from core import db  # noqa: E402


def _norm(sql: str) -> str:
    return " ".join(sql.split())


COUNT_RE = re.compile(r"^SELECT count\(\*\) AS n FROM (?P<table>\w+)(?: WHERE (?P<col>\w+) = \$1)?$")
OWNER_JOIN_RE = re.compile(
    r"^SELECT p\.(?P<owner>\w+) AS owner_id FROM (?P<table>\w+) c "
    r"JOIN (?P<parent>\w+) p ON p\.id = c\.(?P<fk>\w+) WHERE c\.id = \$1$"
)
OWNER_RE = re.compile(r"^SELECT (?P<col>\w+) AS owner_id FROM (?P<table>\w+) WHERE id = \$1$")
SELECT_RE = re.compile(
    r"^SELECT (?P<cols>[\w, ]+) FROM (?P<table>\w+)"
    r"(?: WHERE (?P<col>\w+) (?P<op>= ANY\(\$1::bigint\[\]\)|= \$1))?"
    r"(?: ORDER BY (?P<order>[\w, ]+?))?"
    r"(?: LIMIT \$(?P<limit>\d+) OFFSET \$(?P<offset>\d+))?$"
)
INSERT_RE = re.compile(
    r"^INSERT INTO (?P<table>\w+) \((?P<cols>[\w, ]+)\) VALUES \((?P<vals>[$\d, ]+)\)"
    r"(?: RETURNING (?P<ret>[\w, ]+))?$"
)
UPDATE_RE = re.compile(
    r"^UPDATE (?P<table>\w+) SET (?P<sets>.+) WHERE id = \$(?P<id>\d+)(?: RETURNING (?P<ret>[\w, ]+))?$"
)
DELETE_RE = re.compile(r"^DELETE FROM (?P<table>\w+) WHERE (?P<col>\w+) = \$1$")

DEFAULTS = {
    "contacts": {"is_emergency": False},
}
UNIQUE = {
    "users": ("name",),
}
CASCADES = {
    "users": [("contacts", "user_id")],
    "contacts": [("contact_phone_numbers", "contact_id")],
}


def _split(cols: str) -> list[str]:
    return [c.strip() for c in cols.split(",") if c.strip()]


def _project(row: dict[str, Any], cols: str | None) -> dict[str, Any]:
    return {c: row.get(c) for c in _split(cols or "")}


class FakeStore:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self._ids: dict[str, int] = {}
        self.statements: list[tuple[str, tuple]] = []
        self.transactions_opened = 0
        self.commits = 0
        self.rollbacks = 0
        self.fail_when: Callable[[str, tuple], bool] | None = None

    # -- inspection helpers -------------------------------------------------

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.setdefault(table, [])

    @property
    def writes(self) -> list[tuple[str, tuple]]:
        return [s for s in self.statements if s[0].split(" ", 1)[0] in {"INSERT", "UPDATE", "DELETE"}]

    def snapshot(self) -> dict[str, list[dict[str, Any]]]:
        return copy.deepcopy(self.tables)

    def insert_row(self, table: str, **values: Any) -> dict[str, Any]:
        self._ids[table] = self._ids.get(table, 0) + 1
        now = datetime.now(timezone.utc)
        row = {"id": self._ids[table], "created_at": now, "updated_at": now}
        row.update(DEFAULTS.get(table, {}))
        row.update(values)
        for col in UNIQUE.get(table, ()):
            if any(r.get(col) == row.get(col) for r in self.rows(table)):
                raise db.UniqueViolation(f"duplicate key value violates unique constraint on {table}.{col}")
        self.rows(table).append(row)
        return row

    # -- store contract -----------------------------------------------------

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        rows = self._run(sql, args)
        return rows[0] if rows else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        return self._run(sql, args)

    async def execute(self, sql: str, *args: Any) -> None:
        self._run(sql, args)

    @asynccontextmanager
    async def transaction(self):
        self.transactions_opened += 1
        saved = copy.deepcopy(self.tables), dict(self._ids)
        try:
            yield self
        except BaseException:
            self.tables, self._ids = saved
            self.rollbacks += 1
            raise
        else:
            self.commits += 1

    # -- statement interpreter ----------------------------------------------

    def _run(self, sql: str, args: tuple) -> list[dict[str, Any]]:
        sql = _norm(sql)
        self.statements.append((sql, args))
        if self.fail_when is not None and self.fail_when(sql, args):
            raise db.StoreError("injected failure")

        if m := COUNT_RE.match(sql):
            rows = self.rows(m["table"])
            if m["col"]:
                rows = [r for r in rows if r.get(m["col"]) == args[0]]
            return [{"n": len(rows)}]

        if m := OWNER_JOIN_RE.match(sql):
            child = next((r for r in self.rows(m["table"]) if r["id"] == args[0]), None)
            if child is None:
                return []
            parent = next((r for r in self.rows(m["parent"]) if r["id"] == child[m["fk"]]), None)
            return [] if parent is None else [{"owner_id": parent[m["owner"]]}]

        if m := OWNER_RE.match(sql):
            row = next((r for r in self.rows(m["table"]) if r["id"] == args[0]), None)
            return [] if row is None else [{"owner_id": row[m["col"]]}]

        if m := SELECT_RE.match(sql):
            rows = list(self.rows(m["table"]))
            if m["col"]:
                if m["op"].startswith("= ANY"):
                    wanted = set(args[0])
                    rows = [r for r in rows if r.get(m["col"]) in wanted]
                else:
                    rows = [r for r in rows if r.get(m["col"]) == args[0]]
            if m["order"]:
                for term in reversed(_split(m["order"])):
                    col, _, direction = term.partition(" ")
                    rows.sort(key=lambda r, c=col: r.get(c), reverse=direction.upper() == "DESC")
            if m["limit"]:
                limit = args[int(m["limit"]) - 1]
                offset = args[int(m["offset"]) - 1]
                rows = rows[offset : offset + limit]
            return [_project(r, m["cols"]) for r in rows]

        if m := INSERT_RE.match(sql):
            cols = _split(m["cols"])
            row = self.insert_row(m["table"], **dict(zip(cols, args)))
            return [_project(row, m["ret"])] if m["ret"] else []

        if m := UPDATE_RE.match(sql):
            target_id = args[int(m["id"]) - 1]
            row = next((r for r in self.rows(m["table"]) if r["id"] == target_id), None)
            if row is None:
                return []
            changes: dict[str, Any] = {}
            for assignment in _split(m["sets"]):
                col, _, value = (part.strip() for part in assignment.partition("="))
                changes[col] = datetime.now(timezone.utc) if value == "now()" else args[int(value[1:]) - 1]
            for col in UNIQUE.get(m["table"], ()):
                if col in changes and any(
                    r is not row and r.get(col) == changes[col] for r in self.rows(m["table"])
                ):
                    raise db.UniqueViolation(f"duplicate key value violates unique constraint on {m['table']}.{col}")
            row.update(changes)
            return [_project(row, m["ret"])] if m["ret"] else []

        if m := DELETE_RE.match(sql):
            self._delete_where(m["table"], m["col"], args[0])
            return []

        raise AssertionError(f"FakeStore does not understand: {sql}")

    def _delete_where(self, table: str, col: str, value: Any) -> None:
        doomed = [r for r in self.rows(table) if r.get(col) == value]
        self.tables[table] = [r for r in self.rows(table) if r.get(col) != value]
        for child_table, fk in CASCADES.get(table, []):
            for row in doomed:
                self._delete_where(child_table, fk, row["id"])


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def make_user(store):
    """
    Insert a user row directly and return it (password hash included).
    """

    def _make(name: str, *, password: str = "secret123", phone_number: str | None = None) -> dict:
        return store.insert_row(
            "users",
            name=name,
            password_hash=security.hash_password(password),
            age=None,
            mac=None,
            phone_number=phone_number or f"555-{len(store.rows('users')):04d}",
            image=None,
        )

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: dict) -> dict[str, str]:
        token = security.build_access_token(user_id=int(user["id"]))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def client(store):
    """
    HTTPX AsyncClient talking to the app through ASGITransport, with the
    store dependency pointed at the in-memory double. Lifespan does not run,
    so no database pool is created.
    """
    from main import app

    app.dependency_overrides[db.get_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()
