"""Pytest configuration and fixtures.

Services talk to Supabase through the query-builder chain
(table().select().eq()...execute()). FakeSupabase implements the subset of that
chain the app uses on top of in-memory tables, so tests exercise real service
code without a database.
"""

import os
import re
import threading
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from fastapi.testclient import TestClient

from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.auth import service as auth_service_module

# (table, embedded resource) -> foreign key column on table pointing at resource.id
RELATIONS = {
    ("sermon_notes", "profiles"): "user_id",
    ("sermon_comments", "profiles"): "user_id",
    ("profiles", "churches"): "church_id",
    ("sermon_tags", "tags"): "tag_id",
}

UNIQUE = {
    "profiles": [("username",)],
    "tags": [("name",)],
    "follows": [("follower_id", "following_id")],
    "sermon_praises": [("sermon_id", "user_id")],
    "sermon_tags": [("sermon_id", "tag_id")],
}

# Tables without a surrogate id column
NO_ID = {"follows", "sermon_tags"}


def _split_top_level(text: str) -> List[str]:
    parts, depth, quoted, current = [], 0, False, []
    i = 0
    while i < len(text):
        ch = text[i]
        if quoted:
            current.append(ch)
            if ch == "\\" and i + 1 < len(text):
                current.append(text[i + 1])
                i += 1
            elif ch == '"':
                quoted = False
        elif ch == '"':
            quoted = True
            current.append(ch)
        elif ch == "(":
            depth += 1
            current.append(ch)
        elif ch == ")":
            depth -= 1
            current.append(ch)
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1
    if "".join(current).strip():
        parts.append("".join(current).strip())
    return parts


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return re.sub(r"\\(.)", r"\1", value[1:-1])
    return value


def _ilike(value: Any, pattern: str) -> bool:
    if value is None:
        return False
    regex = "".join(
        ".*" if ch == "%" else "." if ch == "_" else re.escape(ch) for ch in pattern
    )
    return re.fullmatch(regex, str(value), re.IGNORECASE | re.DOTALL) is not None


def _compare(op: str, left: Any, right: Any) -> bool:
    if op == "eq":
        return left == right
    if op == "neq":
        return left != right
    if left is None:
        return False
    if op == "lt":
        return left < right
    if op == "lte":
        return left <= right
    if op == "gt":
        return left > right
    if op == "gte":
        return left >= right
    raise ValueError(f"Unsupported operator {op}")


def _coerce(raw: str) -> Any:
    if raw == "true":
        return True
    if raw == "false":
        return False
    if raw == "null":
        return None
    return raw


def _parse_logic(expr: str) -> Callable[[Dict[str, Any]], bool]:
    """Parse a PostgREST or=(...) body into a row predicate"""
    terms = [_parse_logic_term(part) for part in _split_top_level(expr)]
    return lambda row: any(t(row) for t in terms)


def _parse_logic_term(term: str) -> Callable[[Dict[str, Any]], bool]:
    if term.startswith("and(") and term.endswith(")"):
        inner = [_parse_logic_term(p) for p in _split_top_level(term[4:-1])]
        return lambda row: all(t(row) for t in inner)
    if term.startswith("or(") and term.endswith(")"):
        return _parse_logic(term[3:-1])
    column, op, raw = term.split(".", 2)
    value = _unquote(raw)
    if op == "ilike":
        return lambda row: _ilike(row.get(column), value)
    return lambda row: _compare(op, row.get(column), _coerce(value))


def _parse_select(columns: str) -> List[Dict[str, Any]]:
    fields = []
    for item in _split_top_level(columns):
        if "(" in item:
            head, inner = item.split("(", 1)
            head = head.strip()
            inner_join = head.endswith("!inner")
            name = head.replace("!inner", "").strip()
            fields.append({"embed": name, "inner": inner_join, "columns": inner[:-1]})
        else:
            fields.append({"column": item.strip()})
    return fields


class FakeAPIError(Exception):
    """Stands in for postgrest.exceptions.APIError"""


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.columns = "*"
        self.count_mode = None
        self.head = False
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []
        self.limit_n: Optional[int] = None
        self.offset_n = 0
        self.payload: Any = None

    # -- operations
    def select(self, *columns: str, count: Optional[str] = None, head: Optional[bool] = None):
        self.op = "select"
        self.columns = ",".join(columns) if columns else "*"
        self.count_mode = count
        self.head = bool(head)
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def upsert(self, payload):
        self.op, self.payload = "upsert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    # -- filters
    def _add(self, op: str, column: str, value: Any):
        self.filters.append(lambda row: _compare(op, row.get(column), value))
        return self

    def eq(self, column, value):
        return self._add("eq", column, value)

    def neq(self, column, value):
        return self._add("neq", column, value)

    def lt(self, column, value):
        return self._add("lt", column, value)

    def lte(self, column, value):
        return self._add("lte", column, value)

    def gt(self, column, value):
        return self._add("gt", column, value)

    def gte(self, column, value):
        return self._add("gte", column, value)

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def is_(self, column, value):
        expected = None if value in (None, "null") else value
        self.filters.append(lambda row: row.get(column) is expected)
        return self

    def ilike(self, column, pattern):
        self.filters.append(lambda row: _ilike(row.get(column), pattern))
        return self

    def or_(self, expr):
        self.filters.append(_parse_logic(expr))
        return self

    # -- modifiers
    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def offset(self, n):
        self.offset_n = n
        return self

    # -- execution
    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def _embed(self, row: Dict[str, Any], selected: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        fk = RELATIONS[(self.table_name, selected["embed"])]
        target = next(
            (r for r in self.db.tables[selected["embed"]] if r.get("id") == row.get(fk)), None
        )
        if target is None:
            return None
        return self.db.project(selected["embed"], target, selected["columns"])

    def execute(self):
        with self.db.lock:
            self.db.calls.append((self.table_name, self.op))
        if self.db.before_execute is not None:
            self.db.before_execute(self.table_name, self.op)
        if self.table_name in self.db.fail_tables:
            raise FakeAPIError(f"relation \"{self.table_name}\" is unavailable")
        handler = getattr(self, f"_execute_{self.op}")
        return handler()

    def _execute_select(self):
        fields = _parse_select(self.columns)
        rows = []
        for row in self.db.tables[self.table_name]:
            if not self._matches(row):
                continue
            out = self.db.project(self.table_name, row, self.columns, fields)
            if out is None:
                continue
            rows.append(out)
        for column, desc in reversed(self.orders):
            rows.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        count = len(rows) if self.count_mode else None
        rows = rows[self.offset_n:]
        if self.limit_n is not None:
            rows = rows[:self.limit_n]
        return SimpleNamespace(data=[] if self.head else rows, count=count)

    def _execute_insert(self):
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        inserted = [self.db.insert_row(self.table_name, dict(item)) for item in payload]
        return SimpleNamespace(data=[dict(r) for r in inserted], count=None)

    def _execute_upsert(self):
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        out = []
        for item in payload:
            existing = next(
                (r for r in self.db.tables[self.table_name] if "id" in item and r.get("id") == item["id"]),
                None,
            )
            if existing is not None:
                existing.update(item)
                out.append(dict(existing))
            else:
                out.append(dict(self.db.insert_row(self.table_name, dict(item))))
        return SimpleNamespace(data=out, count=None)

    def _execute_update(self):
        updated = []
        for row in self.db.tables[self.table_name]:
            if self._matches(row):
                row.update(self.payload)
                updated.append(dict(row))
        return SimpleNamespace(data=updated, count=None)

    def _execute_delete(self):
        table = self.db.tables[self.table_name]
        deleted = [r for r in table if self._matches(r)]
        self.db.tables[self.table_name] = [r for r in table if not self._matches(r)]
        return SimpleNamespace(data=[dict(r) for r in deleted], count=None)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str):
        self.db = db
        self.name = name
        self.limit_n = None

    def limit(self, n):
        self.limit_n = n
        return self

    def execute(self):
        self.db.calls.append((self.name, "rpc"))
        if self.name in self.db.fail_tables:
            raise FakeAPIError(f"function {self.name} failed")
        rows = list(self.db.rpc_results.get(self.name, []))
        if self.limit_n is not None:
            rows = rows[:self.limit_n]
        return SimpleNamespace(data=rows, count=None)


class FakeAuth:
    def __init__(self, db: "FakeSupabase"):
        self.db = db
        self.tokens: Dict[str, Dict[str, Any]] = {}
        self.accounts: Dict[str, Dict[str, Any]] = {}

    def sign_up(self, credentials):
        if credentials["email"] in self.accounts:
            raise FakeAPIError("User already registered")
        user = SimpleNamespace(
            id=str(uuid.uuid4()),
            email=credentials["email"],
            user_metadata=credentials.get("options", {}).get("data", {}),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self.accounts[credentials["email"]] = {"user": user, "password": credentials["password"]}
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials):
        account = self.accounts.get(credentials["email"])
        if not account or account["password"] != credentials["password"]:
            raise FakeAPIError("Invalid login credentials")
        token = f"token-{account['user'].id}"
        self.tokens[token] = account["user"]
        return SimpleNamespace(user=account["user"], session=SimpleNamespace(access_token=token))

    def get_user(self, jwt=None):
        user = self.tokens.get(jwt)
        if user is None:
            raise FakeAPIError("invalid JWT")
        return SimpleNamespace(user=user)

    def sign_out(self):
        return None


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [] for name in (
                "profiles", "churches", "sermon_notes", "tags", "sermon_tags",
                "follows", "notifications", "sermon_praises", "sermon_comments",
            )
        }
        self.rpc_results: Dict[str, List[Dict[str, Any]]] = {}
        self.fail_tables: set = set()
        self.calls: List[tuple] = []
        self.before_execute: Optional[Callable[[str, str], None]] = None
        self.lock = threading.Lock()
        self.auth = FakeAuth(self)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    # -- supabase.Client surface
    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params=None) -> FakeRpc:
        return FakeRpc(self, name)

    # -- helpers used by FakeQuery
    def next_timestamp(self) -> str:
        with self.lock:
            self._clock += timedelta(seconds=1)
            return self._clock.isoformat()

    def insert_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        if table not in NO_ID:
            row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self.next_timestamp())
        if table in ("profiles", "churches", "sermon_notes"):
            row.setdefault("updated_at", row["created_at"])
        if table == "notifications":
            row.setdefault("read", False)
        for columns in UNIQUE.get(table, []):
            key = tuple(row.get(c) for c in columns)
            if any(tuple(r.get(c) for c in columns) == key for r in self.tables[table]):
                raise FakeAPIError(f"duplicate key value violates unique constraint on {table}{columns}")
        self.tables[table].append(row)
        return row

    def project(self, table: str, row: Dict[str, Any], columns: str, fields=None) -> Optional[Dict[str, Any]]:
        """Apply a select list to row; None when an !inner embed has no match"""
        fields = fields if fields is not None else _parse_select(columns)
        query = FakeQuery(self, table)
        out: Dict[str, Any] = {}
        for selected in fields:
            if "embed" in selected:
                embedded = query._embed(row, selected)
                if embedded is None and selected["inner"]:
                    return None
                out[selected["embed"]] = embedded
            elif selected["column"] == "*":
                out.update(row)
            else:
                out[selected["column"]] = row.get(selected["column"])
        return out

    # -- test conveniences
    def seed(self, table: str, **row) -> Dict[str, Any]:
        return self.insert_row(table, row)

    def login(self, user_id: str, email: Optional[str] = None) -> Dict[str, str]:
        """Register a bearer token for user_id and return auth headers"""
        token = f"token-{user_id}"
        self.auth.tokens[token] = SimpleNamespace(
            id=user_id,
            email=email or f"{user_id}@example.com",
            user_metadata={},
            created_at=self._clock.isoformat(),
        )
        return {"Authorization": f"Bearer {token}"}

    def calls_for(self, table: str) -> int:
        return sum(1 for name, _ in self.calls if name == table)


@pytest.fixture(autouse=True)
def clear_auth_cache():
    auth_service_module._AUTH_USER_CACHE.clear()
    yield
    auth_service_module._AUTH_USER_CACHE.clear()


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def client(fake_db: FakeSupabase) -> TestClient:
    """Test client wired to the in-memory Supabase fake"""
    from sermon_buddy.main import app

    app.dependency_overrides[get_supabase] = lambda: fake_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def alice(fake_db: FakeSupabase) -> Dict[str, Any]:
    return fake_db.seed("profiles", id=str(uuid.uuid4()), username="alice", full_name="Alice Smith",
                        avatar_url="https://cdn.example.com/alice.png", church_id=None, church_role=None)


@pytest.fixture
def bob(fake_db: FakeSupabase) -> Dict[str, Any]:
    return fake_db.seed("profiles", id=str(uuid.uuid4()), username="bob", full_name=None,
                        avatar_url=None, church_id=None, church_role=None)
