import os
import sys
from collections import defaultdict

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
# Settings are read at import time; no real backend during tests.
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_KEY", None)
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ["ADMIN_EMAIL"] = "admin@darecentre.test"
os.environ["ADMIN_PASSWORD"] = "correct-horse"

from redis.exceptions import ConnectionError as RedisConnectionError

import main  # noqa: F401  structlog configuration used by the app
from core.errors import StoreError
from core.session import SessionStore


class FakeStore:
    """In-memory remote store with per-table unique columns and error injection."""

    def __init__(self, unique=None):
        self.tables = defaultdict(list)
        self.unique = unique or {}
        self.objects = {}
        self.calls = []
        self.failures = {}
        self._ids = defaultdict(int)

    def fail(self, op, message="boom", code=None):
        self.failures[op] = StoreError(message, code=code)

    def _call(self, op, table):
        self.calls.append((op, table))
        err = self.failures.get(op)
        if err:
            raise err

    async def insert_one(self, table, record):
        self._call("insert", table)
        column = self.unique.get(table)
        if column and any(r.get(column) == record.get(column) for r in self.tables[table]):
            raise StoreError('duplicate key value violates unique constraint "email_key"', code="23505")
        self._ids[table] += 1
        row = {"id": self._ids[table], **record}
        self.tables[table].append(row)
        return dict(row)

    async def select_matching(self, table, filters=None, columns="*", order_by=None, descending=True, limit=None):
        self._call("select", table)
        rows = [
            dict(r) for r in self.tables[table]
            if all(r.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda r: str(r.get(order_by) or ""), reverse=descending)
        if limit:
            rows = rows[:limit]
        return rows

    async def select_one(self, table, filters, columns="*"):
        rows = await self.select_matching(table, filters, columns, limit=1)
        return rows[0] if rows else None

    async def upload_object(self, bucket, path, data, content_type):
        self._call("upload", bucket)
        self.objects[(bucket, path)] = (data, content_type)

    def public_url(self, bucket, path):
        return f"https://store.test/storage/v1/object/public/{bucket}/{path}"


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.ttl = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        if ex is None:
            self.ttl.pop(key, None)
        else:
            self.ttl[key] = ex

    async def delete(self, key):
        self.store.pop(key, None)
        self.ttl.pop(key, None)


class DownRedis:
    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("Connection refused")

    async def delete(self, key):
        raise RedisConnectionError("Connection refused")


@pytest.fixture
def fake_store():
    return FakeStore(unique={
        "math_lead_registrations": "email_id",
        "viruthaipongal_registrations": "email_id",
        "viruthaipongal_submissions": "email_id",
    })


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def sessions(fake_redis):
    return SessionStore(fake_redis)


@pytest.fixture
def client(fake_store, sessions):
    from fastapi.testclient import TestClient
    from main import app
    from core.store import get_store
    from core.session import get_session_store

    app.dependency_overrides[get_store] = lambda: fake_store
    app.dependency_overrides[get_session_store] = lambda: sessions
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_client(sessions):
    from fastapi.testclient import TestClient
    from main import app
    from core.store import get_store
    from core.session import get_session_store

    app.dependency_overrides[get_store] = lambda: None
    app.dependency_overrides[get_session_store] = lambda: sessions
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def math_form():
    return {
        "fullName": "Asha",
        "dateOfBirth": "2004-05-01",
        "contactNumber": "9876543210",
        "emailId": "asha@x.com",
        "collegeName": "VHNSN College",
        "department": "BSc",
        "yearSemester": "2nd Year / 3rd Semester",
        "areaOfInterest": "AI & Robotics",
        "courseInterest": "Yes",
        "competitionCourse": "Math + AI = Innovation",
    }


@pytest.fixture
def pongal_form():
    return {
        "fullName": "Kavin",
        "category": "School",
        "standard": "9th Std",
        "instituteName": "Govt Hr Sec School",
        "emailId": "kavin@x.com",
        "contactNumber": "98765 43210",
        "agreedToTerms": True,
    }


@pytest.fixture
def down_sessions_client(fake_store):
    from fastapi.testclient import TestClient
    from main import app
    from core.store import get_store
    from core.session import get_session_store

    app.dependency_overrides[get_store] = lambda: fake_store
    app.dependency_overrides[get_session_store] = lambda: SessionStore(DownRedis())
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
