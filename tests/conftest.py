"""
Pytest configuration and fixtures for the restaurant admin tests.

Supabase is replaced by an in-memory fake that understands the subset of the
PostgREST query builder the app uses, and the image host by a recording fake.
"""
import io
import os
import re
import time
import uuid
from datetime import datetime, timezone

# Must be set before the app (and its config) is imported
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("FREEIMAGE_API_KEY", "test-image-key")

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.main import app
from app.utils import auth
from app.utils.cache import cache
from app.utils.exceptions import ImageUploadError
from app.utils.photo import get_image_host
from app.utils.supabase_client import get_supabase

JOIN_PATTERN = re.compile(r"(\w+)\s*:\s*(\w+)\s*\(([^)]*)\)")


class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = len(data)


class FakeQuery:
    """Chainable query mimicking supabase-py's table() builder."""

    def __init__(self, db, table_name):
        self.db = db
        self.table_name = table_name
        self.operation = "select"
        self.columns = "*"
        self.filters = []
        self.order_by = None
        self.descending = False
        self.row_limit = None
        self.payload = None

    def select(self, columns="*", count=None):
        self.operation = "select"
        self.columns = columns
        return self

    def insert(self, rows):
        self.operation = "insert"
        self.payload = rows
        return self

    def update(self, values):
        self.operation = "update"
        self.payload = values
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = column
        self.descending = desc
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def _matches(self, row):
        return all(str(row.get(column)) == str(value) for column, value in self.filters)

    def _project(self, row):
        joins = JOIN_PATTERN.findall(self.columns)
        plain = JOIN_PATTERN.sub("", self.columns)
        names = [c.strip() for c in plain.split(",") if c.strip()]

        if "*" in names:
            result = dict(row)
        else:
            result = {name: row.get(name) for name in names}

        for alias, fk_column, fields in joins:
            target = next(
                (r for r in self.db.tables.get(alias, []) if r.get("id") == row.get(fk_column)),
                None,
            )
            wanted = [f.strip() for f in fields.split(",") if f.strip()]
            result[alias] = {f: target.get(f) for f in wanted} if target else None
        return result

    def execute(self):
        self.db.calls.append((self.table_name, self.operation, list(self.filters)))
        if (self.table_name, self.operation) in self.db.failures:
            raise RuntimeError(f"simulated failure on {self.table_name} {self.operation}")

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.operation == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for item in payload:
                row = dict(item)
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
                rows.append(row)
                inserted.append(dict(row))
            return FakeResponse(inserted)

        matched = [row for row in rows if self._matches(row)]

        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.operation == "delete":
            self.db.tables[self.table_name] = [row for row in rows if not self._matches(row)]
            return FakeResponse([dict(row) for row in matched])

        if self.order_by:
            matched = sorted(matched, key=lambda r: r.get(self.order_by) or "", reverse=self.descending)
        if self.row_limit is not None:
            matched = matched[:self.row_limit]
        return FakeResponse([self._project(row) for row in matched])


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.calls = []
        self.failures = set()

    def table(self, name):
        return FakeQuery(self, name)

    def rows(self, name):
        return self.tables.get(name, [])

    def fail(self, table_name, operation):
        self.failures.add((table_name, operation))


class FakeImageHost:
    def __init__(self, url="https://iili.io/fake.png"):
        self.url = url
        self.error = None
        self.calls = []

    def upload(self, data, filename="image"):
        self.calls.append((filename, data))
        if self.error:
            raise ImageUploadError(self.error)
        return self.url


def make_png(size=(4, 4)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def fake_db():
    """Two restaurants, one user each, plus a user without a restaurant."""
    db = FakeSupabase()
    db.tables["profiles"] = [
        {"id": "user-1", "restaurant_id": "rest-1"},
        {"id": "user-2", "restaurant_id": "rest-2"},
        {"id": "user-orphan", "restaurant_id": None},
    ]
    db.tables["staff"] = [
        {"id": "staff-zoe", "first_name": "Zoe", "last_name": "Park", "position": "chef",
         "Shift": "evening", "phone": None, "email": None, "restaurant_id": "rest-1"},
        {"id": "staff-amir", "first_name": "Amir", "last_name": "Khan", "position": "waiter",
         "Shift": "morning", "phone": "555-0100", "email": "amir@example.com", "restaurant_id": "rest-1"},
        {"id": "staff-other", "first_name": "Bea", "last_name": "Other", "position": "host",
         "Shift": "night", "phone": None, "email": None, "restaurant_id": "rest-2"},
    ]
    db.tables["staff_leaves"] = []
    db.tables["menu_items"] = []
    return db


@pytest.fixture
def fake_image_host():
    return FakeImageHost()


@pytest.fixture
def session_user():
    """Auth user id the fake token decodes to. Override per test."""
    return {"id": "user-1"}


@pytest.fixture
def client(fake_db, fake_image_host, session_user, monkeypatch):
    """Signed-in test client with Supabase and the image host replaced."""
    def fake_decode(token):
        if token != "test-token":
            return None
        return {"sub": session_user["id"], "email": f"{session_user['id']}@example.com", "exp": int(time.time()) + 3600}

    monkeypatch.setattr(auth, "decode_supabase_jwt", fake_decode)
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_image_host] = lambda: fake_image_host

    with TestClient(app) as test_client:
        test_client.cookies.set("sb_access_token", "test-token")
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(fake_db):
    app.dependency_overrides[get_supabase] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
