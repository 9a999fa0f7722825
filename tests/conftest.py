"""
Pytest configuration and fixtures for ZipParents tests.

Services run against `FakeSupabase`, an in-memory stand-in for the slice
of the Supabase client they use (tables, storage buckets, auth).
"""

import asyncio
import copy
import os
from enum import Enum
from typing import Any
from unittest.mock import MagicMock

import pytest

# Set test environment before importing zipparents modules
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-key"
os.environ["ZIPPARENTS_ENV"] = "development"

from zipparents.auth.context import AuthContext  # noqa: E402
from zipparents.models.user import UserRole, VerificationStatus  # noqa: E402

STORAGE_URL = "https://test.supabase.co/storage/v1/object/public"


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# =============================================================================
# In-memory backend
# =============================================================================


class FakeResult:
    def __init__(self, data: list[dict], count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """PostgREST-style builder over one in-memory table."""

    def __init__(self, backend: "FakeSupabase", table: str):
        self.backend = backend
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.count = None
        self.payload: Any = None
        self.filters: list = []
        self.orders: list[tuple[str, bool]] = []
        self.limit_n: int | None = None
        self.range_: tuple[int, int] | None = None

    # Operations

    def select(self, columns: str = "*", count: str | None = None):
        self.op, self.columns, self.count = "select", columns, count
        return self

    def insert(self, data):
        self.op, self.payload = "insert", data
        return self

    def upsert(self, data, **kwargs):
        self.op, self.payload = "upsert", data
        return self

    def update(self, data):
        self.op, self.payload = "update", data
        return self

    def delete(self):
        self.op = "delete"
        return self

    # Filters

    def eq(self, column, value):
        value = _plain(value)
        self.filters.append(lambda row: _plain(row.get(column)) == value)
        return self

    def neq(self, column, value):
        value = _plain(value)
        self.filters.append(lambda row: _plain(row.get(column)) != value)
        return self

    def in_(self, column, values):
        values = [_plain(v) for v in values]
        self.filters.append(lambda row: _plain(row.get(column)) in values)
        return self

    def contains(self, column, values):
        self.filters.append(lambda row: all(v in (row.get(column) or []) for v in values))
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] >= value)
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] <= value)
        return self

    # Shaping

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def range(self, start, end):
        self.range_ = (start, end)
        return self

    def _matches(self, row: dict) -> bool:
        return all(f(row) for f in self.filters)

    def _project(self, row: dict) -> dict:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [c.strip() for c in self.columns.split(",")]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def execute(self) -> FakeResult:
        if (self.table, self.op) in self.backend.failures:
            raise RuntimeError(f"backend unavailable ({self.op} {self.table})")
        self.backend.calls.append((self.table, self.op))
        rows = self.backend.tables.setdefault(self.table, [])

        if self.op in ("insert", "upsert"):
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            stored = []
            for item in payload:
                item = copy.deepcopy(item)
                existing = next((r for r in rows if "id" in item and r.get("id") == item["id"]), None)
                if existing is not None and self.op == "upsert":
                    existing.update(item)
                    stored.append(copy.deepcopy(existing))
                    continue
                item.setdefault("id", self.backend.next_id(self.table))
                rows.append(item)
                stored.append(copy.deepcopy(item))
            return FakeResult(stored)

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return FakeResult([copy.deepcopy(r) for r in matched])

        if self.op == "delete":
            self.backend.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResult([copy.deepcopy(r) for r in matched])

        total = len(matched)
        for column, desc in reversed(self.orders):
            present = [r for r in matched if r.get(column) is not None]
            missing = [r for r in matched if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=desc)
            matched = present + missing
        if self.range_ is not None:
            matched = matched[self.range_[0]:self.range_[1] + 1]
        if self.limit_n is not None:
            matched = matched[:self.limit_n]
        return FakeResult(
            [self._project(r) for r in matched],
            count=total if self.count else None,
        )


class FakeBucket:
    def __init__(self, backend: "FakeSupabase", name: str):
        self.backend = backend
        self.name = name

    def upload(self, path, file, file_options=None):
        if ("storage", "upload") in self.backend.failures:
            raise RuntimeError("storage unavailable")
        self.backend.files[(self.name, path)] = file
        return {"path": path}

    def get_public_url(self, path):
        return f"{STORAGE_URL}/{self.name}/{path}"

    def remove(self, paths):
        if ("storage", "remove") in self.backend.failures:
            raise RuntimeError("storage unavailable")
        for path in paths:
            self.backend.files.pop((self.name, path), None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self, backend: "FakeSupabase"):
        self.backend = backend

    def from_(self, bucket):
        return FakeBucket(self.backend, bucket)


class FakeSupabase:
    """In-memory Supabase client: tables, storage and a mocked auth API."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.files: dict[tuple[str, str], bytes] = {}
        self.failures: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str]] = []
        self.storage = FakeStorage(self)
        self.auth = MagicMock()
        self._ids = 0

    def table(self, name):
        return FakeQuery(self, name)

    def next_id(self, table: str) -> str:
        self._ids += 1
        return f"{table}-{self._ids}"

    def seed(self, table: str, *rows: dict) -> None:
        self.tables.setdefault(table, []).extend(copy.deepcopy(list(rows)))

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])

    def row(self, table: str, row_id: str) -> dict | None:
        return next((r for r in self.rows(table) if r.get("id") == row_id), None)

    def fail(self, table: str, op: str) -> None:
        """Make every `op` ("select", "update", "upload", ...) on `table` raise."""
        self.failures.add((table, op))


# =============================================================================
# Fixtures
# =============================================================================


def make_user_row(uid: str, **overrides) -> dict:
    """A fully onboarded, active, public user document."""
    row = {
        "id": uid,
        "email": f"{uid}@example.com",
        "display_name": f"Parent {uid}",
        "bio": "Parent of two who loves the park.",
        "zip_code": "10001",
        "phone_number": "555-0100",
        "age_range": "35-44",
        "interests": ["Playdates", "Reading", "Music"],
        "children_age_ranges": ["3-5"],
        "relationship_status": "married",
        "email_verified": True,
        "age_verified": True,
        "verification_status": "unverified",
        "privacy_settings": {
            "show_email": False,
            "show_phone": False,
            "show_exact_location": True,
            "profile_visibility": "public",
        },
        "role": "user",
        "status": "active",
        "onboarding_completed": True,
        "profile_completeness": 95,
        "last_active": "2026-01-01T12:00:00+00:00",
        "created_at": "2025-06-01T12:00:00+00:00",
        "updated_at": "2025-06-01T12:00:00+00:00",
    }
    row.update(overrides)
    return row


def make_ctx(
    client: FakeSupabase,
    user_id: str = "me",
    role: UserRole = UserRole.USER,
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED,
) -> AuthContext:
    return AuthContext(
        user_id=user_id,
        client=client,
        email=f"{user_id}@example.com",
        access_token="token",
        role=role,
        verification_status=verification_status,
    )


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def ctx(fake_supabase) -> AuthContext:
    """Session for user "me", whose document exists."""
    fake_supabase.seed("users", make_user_row("me"))
    return make_ctx(fake_supabase, "me")


@pytest.fixture
def admin_ctx(fake_supabase) -> AuthContext:
    fake_supabase.seed("users", make_user_row("admin", role="admin", display_name="Admin"))
    return make_ctx(fake_supabase, "admin", role=UserRole.ADMIN)


@pytest.fixture
def api(fake_supabase):
    """
    TestClient for the full app, authenticated as "me" on the fake backend.

    `api.act_as(user_id, role=..., verification_status=...)` switches the
    requesting user.
    """
    from fastapi.testclient import TestClient

    from onboarding.api import _sessions
    from zipparents.web.app import app
    from zipparents.web.auth import get_auth_context

    def act_as(user_id="me", role=UserRole.USER, verification_status=VerificationStatus.UNVERIFIED):
        app.dependency_overrides[get_auth_context] = lambda: make_ctx(
            fake_supabase, user_id, role, verification_status
        )

    act_as()
    client = TestClient(app)
    client.act_as = act_as
    yield client

    app.dependency_overrides.clear()
    _sessions.clear()
