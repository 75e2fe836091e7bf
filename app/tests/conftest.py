import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../')))

import re
import uuid
import pytest
from fastapi.testclient import TestClient

from ..main import app
from app.api.routes.auth import verify_token

TEST_USER = {
    "email": "test@pytest.com",
    "user_id": "00000000-0000-0000-0000-000000000001",
}

write_table_pattern = re.compile(r"^\s*(?:insert\s+into|update|delete\s+from)\s+(\w+)", re.IGNORECASE)

class FakeTransaction:
    def __init__(self, conn):
        self.conn = conn

    async def start(self):
        self.conn.staged = {}
        self.conn.in_transaction = True

    async def commit(self):
        for table, rows in self.conn.staged.items():
            self.conn.tables.setdefault(table, []).extend(rows)
        self.conn.staged = {}
        self.conn.in_transaction = False
        self.conn.commits += 1

    async def rollback(self):
        self.conn.staged = {}
        self.conn.in_transaction = False
        self.conn.rollbacks += 1

class FakeConnection:
    """In-memory stand-in for an asyncpg connection.

    Writes are recorded per table as ``{"id": ..., "args": (...)}`` and only
    become visible in ``tables`` once the surrounding transaction commits.
    Reads are answered by ``handlers``: ``(substring, result)`` pairs where
    result is a value or a callable taking the query args. Candidate lookups
    against ``exercises e`` are answered from ``catalog``.
    """

    def __init__(self, catalog=None, handlers=None, fail_on=None):
        self.catalog = list(catalog or [])
        self.handlers = list(handlers or [])
        self.fail_on = fail_on
        self.tables = {}
        self.staged = {}
        self.in_transaction = False
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.queries = []

    def transaction(self):
        return FakeTransaction(self)

    async def close(self):
        self.closed = True

    async def execute(self, query, *args):
        self._write(query, args)
        return "OK"

    async def fetchval(self, query, *args):
        if self._is_write(query) and not self._has_handler(query):
            return self._write(query, args)
        return self._handle(query, args, None)

    async def fetchrow(self, query, *args):
        return self._handle(query, args, None)

    async def fetch(self, query, *args):
        if "from exercises e" in query:
            self.queries.append((query, args))
            return self._candidates(*args)
        return self._handle(query, args, [])

    def rows(self, table):
        return self.tables.get(table, [])

    def _has_handler(self, query):
        return any(substring in query for substring, _ in self.handlers)

    def _is_write(self, query):
        return write_table_pattern.match(query) is not None

    def _write(self, query, args):
        self.queries.append((query, args))
        match = write_table_pattern.match(query)
        if match is None:
            return self._handle(query, args, None)
        table = match.group(1)

        if self.fail_on is not None:
            substring, nth = self.fail_on
            if substring in query:
                self.fail_on = (substring, nth - 1)
                if nth <= 1:
                    raise RuntimeError(f"write to {table} failed")

        row = {"id": str(uuid.uuid4()), "args": args}
        target = self.staged if self.in_transaction else self.tables
        target.setdefault(table, []).append(row)
        return row["id"]

    def _handle(self, query, args, default):
        self.queries.append((query, args))
        for substring, result in self.handlers:
            if substring in query:
                return result(*args) if callable(result) else result
        return default

    def _candidates(self, muscle, sub_part, difficulties, place, restrictions):
        return [
            exercise for exercise in self.catalog
            if exercise["muscle"] == muscle
            and exercise["sub_part"] == sub_part
            and (difficulties is None or exercise["difficulty"] in difficulties)
            and exercise["place"] == place
            and not any(r in (exercise.get("restrictions") or "") for r in restrictions)
        ]

def catalog_exercise(muscle, sub_part, difficulty="principiante", place="gimnasio", restrictions=""):
    return {
        "id": str(uuid.uuid4()),
        "muscle": muscle,
        "sub_part": sub_part,
        "difficulty": difficulty,
        "place": place,
        "restrictions": restrictions,
    }

@pytest.fixture
def client():
    app.dependency_overrides[verify_token] = lambda: TEST_USER
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def use_connection(monkeypatch):
    """Route ``setup_connection`` of the given modules to one fake connection."""
    def patch(conn, *modules):
        async def setup_connection():
            return conn
        for module in modules:
            monkeypatch.setattr(module, "setup_connection", setup_connection)
        return conn
    return patch
