import copy
import os
import uuid
from collections import defaultdict
from datetime import datetime, timezone

import pytest

# Set env before importing app components
os.environ["APP_ENV"] = "testing"

from fastapi.testclient import TestClient

from teamdash.core.config import Config, SupabaseSettings
from teamdash.dependencies import get_auth_gateway, get_storage_gateway, get_table_gateway
from teamdash.gateways import Failure, Success
from teamdash.main import create_app

TEST_SETTINGS = Config(
    environment="testing",
    supabase=SupabaseSettings(
        url="https://project.supabase.test",
        key="anon-key",
        service_role_key="service-key",
    ),
)


class _Recorder:
    """Shared call log and failure injection for the gateway fakes."""

    def __init__(self):
        self.calls = []
        self._failures = {}

    def fail(self, method, target=None, status_code=400, body=None):
        self._failures[(method, target)] = Failure(status_code, body or {"message": f"{method} failed"})

    def _failure(self, method, target=None):
        return self._failures.get((method, target)) or self._failures.get((method, None))


class FakeTableGateway(_Recorder):
    """In-memory stand-in for PostgREST; understands ``eq.`` filters only."""

    def __init__(self):
        super().__init__()
        self.rows = defaultdict(list)

    def seed(self, table, **row):
        row.setdefault("id", str(uuid.uuid4()))
        self.rows[table].append(row)
        return copy.deepcopy(row)

    @staticmethod
    def _matches(row, filters):
        for column, expr in (filters or {}).items():
            op, _, value = expr.partition(".")
            if op == "eq" and str(row.get(column)) != value:
                return False
        return True

    def query(self, table, filters=None, options=None):
        self.calls.append(("query", table, dict(filters or {}), options))
        failure = self._failure("query", table)
        if failure:
            return failure
        return Success([copy.deepcopy(r) for r in self.rows[table] if self._matches(r, filters)])

    def insert(self, table, record):
        self.calls.append(("insert", table, copy.deepcopy(record)))
        failure = self._failure("insert", table)
        if failure:
            return failure
        now = datetime.now(timezone.utc).isoformat()
        row = {"id": str(uuid.uuid4()), **record, "created_at": now, "updated_at": now}
        self.rows[table].append(row)
        return Success(copy.deepcopy(row))

    def update(self, table, filters, record):
        self.calls.append(("update", table, dict(filters), copy.deepcopy(record)))
        failure = self._failure("update", table)
        if failure:
            return failure
        updated = []
        for row in self.rows[table]:
            if self._matches(row, filters):
                row.update(record)
                updated.append(copy.deepcopy(row))
        return Success(updated)

    def remove(self, table, filters):
        self.calls.append(("remove", table, dict(filters)))
        failure = self._failure("remove", table)
        if failure:
            return failure
        kept, removed = [], []
        for row in self.rows[table]:
            (removed if self._matches(row, filters) else kept).append(row)
        self.rows[table] = kept
        return Success(removed)


class FakeStorageGateway(_Recorder):
    base_url = "https://project.supabase.test/storage/v1"

    def __init__(self):
        super().__init__()
        self.objects = {}

    def upload(self, bucket, path, content, content_type):
        self.calls.append(("upload", bucket, path, content_type))
        failure = self._failure("upload")
        if failure:
            return failure
        self.objects[(bucket, path)] = content
        return Success({"Key": f"{bucket}/{path}"})

    def remove(self, bucket, path):
        self.calls.append(("remove", bucket, path))
        failure = self._failure("remove")
        if failure:
            return failure
        self.objects.pop((bucket, path), None)
        return Success([{"name": path}])

    def list(self, bucket, prefix=""):
        self.calls.append(("list", bucket, prefix))
        return Success([{"name": p} for (b, p) in self.objects if b == bucket and p.startswith(prefix)])

    def public_url(self, bucket, path):
        self.calls.append(("public_url", bucket, path))
        return f"{self.base_url}/object/public/{bucket}/{path}"


class FakeAuthGateway(_Recorder):
    def __init__(self):
        super().__init__()
        self.tokens = {}

    def add_user(self, token, **identity):
        identity.setdefault("id", str(uuid.uuid4()))
        self.tokens[token] = identity
        return identity

    def sign_up(self, email, password, profile_metadata=None):
        self.calls.append(("sign_up", email, profile_metadata))
        failure = self._failure("sign_up")
        if failure:
            return failure
        return Success({"id": str(uuid.uuid4()), "email": email, "user_metadata": profile_metadata})

    def sign_in(self, email, password):
        self.calls.append(("sign_in", email))
        failure = self._failure("sign_in")
        if failure:
            return failure
        return Success({
            "access_token": "access-123",
            "refresh_token": "refresh-456",
            "expires_in": 3600,
            "token_type": "bearer",
            "user": {"id": "user-1", "email": email},
        })

    def resolve_user(self, bearer_token):
        self.calls.append(("resolve_user", bearer_token))
        if bearer_token not in self.tokens:
            return Failure(401, {"msg": "invalid JWT"})
        return Success(dict(self.tokens[bearer_token]))


@pytest.fixture(scope="function")
def tables():
    return FakeTableGateway()


@pytest.fixture(scope="function")
def storage():
    return FakeStorageGateway()


@pytest.fixture(scope="function")
def auth():
    return FakeAuthGateway()


@pytest.fixture(scope="function")
def manager(auth):
    """A signed-in manager; ``manager["token"]`` is their bearer token."""
    identity = auth.add_user("manager-token", email="lead@example.com", role="manager")
    return {**identity, "token": "manager-token"}


@pytest.fixture(scope="function")
def app(tables, storage, auth):
    application = create_app(TEST_SETTINGS)
    application.dependency_overrides[get_table_gateway] = lambda: tables
    application.dependency_overrides[get_storage_gateway] = lambda: storage
    application.dependency_overrides[get_auth_gateway] = lambda: auth
    yield application
    application.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app):
    with TestClient(app) as c:
        yield c
