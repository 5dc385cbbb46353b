"""Shared fixtures: an in-memory Supabase stand-in injected as the shared client."""

from __future__ import annotations

import os
from types import SimpleNamespace

os.environ.setdefault("LOG_TO_FILE", "false")

import pytest

from scripts.lib import supabase_client


def lookup(row, column):
    """Resolve 'a.b' against nested (embedded) rows."""
    value = row
    for part in column.split("."):
        if isinstance(value, list):
            value = value[0] if value else None
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


class FakeQuery:
    """Chainable query that mimics the postgrest builder methods we use."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.filters = []
        self._orders = []
        self._range = None
        self._limit = None
        self._count = None
        self._insert = None
        self._delete = False

    def select(self, columns="*", count=None):
        self.columns = columns
        self._count = count
        return self

    def insert(self, row):
        self._insert = row
        return self

    def delete(self):
        self._delete = True
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def gte(self, column, value):
        self.filters.append(("gte", column, value))
        return self

    def lte(self, column, value):
        self.filters.append(("lte", column, value))
        return self

    def order(self, column, desc=False):
        self._orders.append((column, desc))
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row):
        for op, column, value in self.filters:
            current = lookup(row, column)
            if op == "eq" and current != value:
                return False
            if op == "in" and current not in value:
                return False
            if op == "gte" and (current is None or current < value):
                return False
            if op == "lte" and (current is None or current > value):
                return False
        return True

    def execute(self):
        self.db.calls.append(("table", self.table, list(self.filters)))
        if self.table in self.db.errors:
            raise self.db.errors[self.table]

        stored = self.db.tables.setdefault(self.table, [])
        if self._insert is not None:
            row = {"id": f"{self.table}-{len(stored) + 1}", **self._insert}
            stored.append(row)
            return SimpleNamespace(data=[dict(row)], count=None)
        if self._delete:
            removed = [r for r in stored if self._matches(r)]
            self.db.tables[self.table] = [r for r in stored if not self._matches(r)]
            return SimpleNamespace(data=removed, count=None)

        rows = [dict(r) for r in stored if self._matches(r)]
        total = len(rows)
        for column, desc in reversed(self._orders):
            rows.sort(key=lambda r: (lookup(r, column) is None, str(lookup(r, column))), reverse=desc)
        if self._range is not None:
            start, end = self._range
            rows = rows[start: end + 1]
        if self._limit is not None:
            rows = rows[: self._limit]
        if self.db.max_rows is not None:
            rows = rows[: self.db.max_rows]
        return SimpleNamespace(data=rows, count=total if self._count else None)


class FakeRPC:
    def __init__(self, db: "FakeSupabase", fn: str, params: dict):
        self.db = db
        self.fn = fn
        self.params = params

    def execute(self):
        self.db.calls.append(("rpc", self.fn, self.params))
        if self.fn in self.db.errors:
            raise self.db.errors[self.fn]
        return SimpleNamespace(data=self.db.rpc_results.get(self.fn))


class FakeSupabase:
    """Tables, RPC payloads and injected failures, with a log of every call.

    ``max_rows`` caps every response the way PostgREST's max-rows does.
    """

    def __init__(self):
        self.tables = {}
        self.rpc_results = {}
        self.errors = {}
        self.calls = []
        self.max_rows = None

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, fn, params=None):
        return FakeRPC(self, fn, params or {})

    def table_calls(self, name=None):
        return [c for c in self.calls if c[0] == "table" and (name is None or c[1] == name)]

    def rpc_calls(self, fn=None):
        return [c for c in self.calls if c[0] == "rpc" and (fn is None or c[1] == fn)]


@pytest.fixture()
def fake_db():
    """A fresh fake store installed as the shared Supabase client."""
    db = FakeSupabase()
    supabase_client.set_client(db)
    yield db
    supabase_client.set_client(None)
