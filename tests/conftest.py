import re
import uuid
from datetime import datetime, timezone

import httpx
import pytest
from postgrest.exceptions import APIError

from app.utils.timeutil import parse_timestamp

NOW = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


def _comparable(value):
    if isinstance(value, str):
        try:
            return parse_timestamp(value)
        except ValueError:
            return value
    if isinstance(value, datetime):
        return parse_timestamp(value)
    return value


def _compare(op, left, right):
    if left is None:
        return False
    left, right = _comparable(left), _comparable(right)
    if type(left) != type(right):
        try:
            left, right = float(left), float(right)
        except (TypeError, ValueError):
            return False
    return {
        "gt": lambda: left > right,
        "gte": lambda: left >= right,
        "lt": lambda: left < right,
        "lte": lambda: left <= right,
    }[op]()


def _like(value, pattern, ignore_case):
    regex = "^" + ".*".join(re.escape(p) for p in pattern.split("%")) + "$"
    return value is not None and re.match(regex, str(value), re.I if ignore_case else 0) is not None


def _or_clause(row, clause):
    column, op, value = clause.split(".", 2)
    if op == "is":
        return row.get(column) is None if value == "null" else row.get(column) == (value == "true")
    if op == "eq":
        return str(row.get(column)) == value
    if op == "ilike":
        return _like(row.get(column), value, True)
    return _compare(op, row.get(column), value)


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.orders = []
        self.window = None
        self.count = None
        self.single_mode = None

    # verbs
    def select(self, columns="*", count=None):
        self.count = count
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters
    def _add(self, fn):
        self.filters.append(fn)
        return self

    def eq(self, column, value):
        return self._add(lambda r: r.get(column) == value)

    def neq(self, column, value):
        return self._add(lambda r: r.get(column) != value)

    def gt(self, column, value):
        return self._add(lambda r: _compare("gt", r.get(column), value))

    def gte(self, column, value):
        return self._add(lambda r: _compare("gte", r.get(column), value))

    def lt(self, column, value):
        return self._add(lambda r: _compare("lt", r.get(column), value))

    def lte(self, column, value):
        return self._add(lambda r: _compare("lte", r.get(column), value))

    def in_(self, column, values):
        values = list(values)
        return self._add(lambda r: r.get(column) in values)

    def ilike(self, column, pattern):
        return self._add(lambda r: _like(r.get(column), pattern, True))

    def or_(self, filters):
        clauses = filters.split(",")
        return self._add(lambda r: any(_or_clause(r, c) for c in clauses))

    # shaping
    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, n):
        self.window = (0, n - 1)
        return self

    def range(self, start, end):
        self.window = (start, end)
        return self

    def maybe_single(self):
        self.single_mode = "maybe"
        return self

    def single(self):
        self.single_mode = "single"
        return self

    def _matching(self):
        rows = self.db.tables.setdefault(self.table, [])
        return [r for r in rows if all(f(r) for f in self.filters)]

    def execute(self):
        self.db.queries.append((self.table, self.op))
        error = self.db.errors.get(self.table)
        if error is not None:
            raise error
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            new = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in new:
                row = {"id": str(uuid.uuid4()), "created_at": NOW.isoformat(), **item}
                rows.append(row)
                created.append(dict(row))
            return FakeResponse(created)
        if self.op == "update":
            changed = []
            for row in self._matching():
                row.update(self.payload)
                changed.append(dict(row))
            return FakeResponse(changed)
        if self.op == "delete":
            gone = self._matching()
            self.db.tables[self.table] = [r for r in rows if r not in gone]
            return FakeResponse(gone)

        found = [dict(r) for r in self._matching()]
        for column, desc in reversed(self.orders):
            found.sort(key=lambda r: (r.get(column) is None, _comparable(r.get(column))), reverse=desc)
        total = len(found)
        if self.window:
            found = found[self.window[0]:self.window[1] + 1]
        if self.single_mode:
            if not found:
                if self.single_mode == "maybe":
                    return None
                raise APIError({"message": "JSON object requested, multiple (or no) rows returned",
                                "code": "PGRST116", "hint": None, "details": None})
            return FakeResponse(found[0])
        return FakeResponse(found, total if self.count else None)


class FakeRpc:
    def __init__(self, db, name, params):
        self.db, self.name, self.params = db, name, params

    def execute(self):
        self.db.queries.append((self.name, "rpc"))
        fn = self.db.functions.get(self.name)
        if fn is None:
            raise APIError({"message": f"Could not find the function public.{self.name}",
                            "code": "PGRST202", "hint": None, "details": None})
        return FakeResponse(fn(**self.params))


class FakeSupabase:
    """In-memory stand-in for the supabase client's PostgREST query builder."""

    def __init__(self):
        self.tables = {}
        self.functions = {}
        self.errors = {}
        self.queries = []

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})

    def count(self, table, op="select"):
        return sum(1 for q in self.queries if q == (table, op))

    def missing_table(self, table):
        self.errors[table] = APIError({"message": f'relation "public.{table}" does not exist',
                                       "code": "42P01", "hint": None, "details": None})


@pytest.fixture
def db(monkeypatch):
    fake = FakeSupabase()
    monkeypatch.setattr("app.db.supabase.supabase", fake)
    return fake


class FakeBackend:
    """Routes httpx requests of the order API to canned answers."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, path, status=200, json=None, error=None):
        self.routes[(method, path)] = (status, json, error)

    def handler(self, request: httpx.Request):
        self.requests.append(request)
        status, body, error = self.routes.get((request.method, request.url.path), (404, {"message": "no route"}, None))
        if error is not None:
            raise error
        return httpx.Response(status, json=body)

    def client(self):
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url="http://backend.test")


@pytest.fixture
def backend(monkeypatch):
    fake = FakeBackend()
    monkeypatch.setattr("app.services.backend_api.api_client", fake.client)
    return fake
