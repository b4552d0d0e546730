"""Shared pytest fixtures for storefront tests."""

import os
import tempfile

# must be in place before storefront.main is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_DIR"] = tempfile.mkdtemp(prefix="storefront-test-")
os.environ["ADMIN_EMAIL"] = "staff@example.com"
os.environ["ADMIN_PASSWORD"] = "s3cret-pass"
os.environ.pop("ADMIN_PASSWORD_HASH", None)
os.environ["JWT_SECRET"] = "test-secret"

import pytest

from storefront.db import make_engine
from storefront.gateway import GatewayResult, SqlGateway
from storefront.notify import Notifier
from storefront.storage import BucketStorage


class ScriptedGateway(SqlGateway):
    """SQLite gateway that records every call and can reject chosen operations."""

    def __init__(self, engine, fail=()):
        super().__init__(engine)
        self.fail = set(fail)
        self.calls = []

    def _intercept(self, op, table):
        self.calls.append((op, table))
        if op in self.fail:
            return GatewayResult(error=f"{op} rejected by backend")
        return None

    def select(self, table, filters=None, order=None, ascending=True):
        rejected = self._intercept("select", table)
        if rejected is not None:
            return rejected
        return super().select(table, filters, order, ascending)

    def insert(self, table, record):
        rejected = self._intercept("insert", table)
        if rejected is not None:
            return rejected
        return super().insert(table, record)

    def update(self, table, record, filters):
        rejected = self._intercept("update", table)
        if rejected is not None:
            return rejected
        return super().update(table, record, filters)

    def delete(self, table, filters):
        rejected = self._intercept("delete", table)
        if rejected is not None:
            return rejected
        return super().delete(table, filters)

    def ping(self):
        return "ping" not in self.fail and super().ping()


class RecordingStorage(BucketStorage):
    def __init__(self, root, public_base_url="http://testserver", fail=False):
        super().__init__(root, public_base_url)
        self.fail = fail
        self.uploads = []

    def upload(self, bucket, path, content, cache_control="3600", upsert=True):
        self.uploads.append((bucket, path, len(content)))
        if self.fail:
            return "bucket policy denied the upload"
        return super().upload(bucket, path, content, cache_control, upsert)


def _seed_orders(gw):
    rows = [
        {
            "order_id": "TEST0001",
            "product_name": "Productivity Software X",
            "price": 49.99,
            "discord_username": "usuario_test",
            "email": "test@ejemplo.com",
            "status": "Pending",
            "message": "This is a test order",
        },
        {
            "order_id": "ORD-0002",
            "product_name": "Pixel Palette Pack",
            "price": 15.0,
            "discord_username": "artsy",
            "email": "artsy@example.com",
            "status": "Completed",
        },
        {
            "order_id": "ORD-0003",
            "product_name": "Brain Trainer",
            "price": 9.5,
            "discord_username": None,
            "email": "quiet@example.com",
            "status": None,
        },
    ]
    for row in rows:
        assert gw.insert("orders", row).ok


@pytest.fixture
def gateway():
    gw = ScriptedGateway(make_engine("sqlite://"))
    gw.create_all()
    return gw


@pytest.fixture
def seeded_gateway(gateway):
    _seed_orders(gateway)
    return gateway


@pytest.fixture
def storage(tmp_path):
    return RecordingStorage(tmp_path / "buckets")


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def client(seeded_gateway, storage):
    from fastapi.testclient import TestClient

    from storefront import main

    main.app.dependency_overrides[main.get_gateway] = lambda: seeded_gateway
    main.app.dependency_overrides[main.get_storage] = lambda: storage
    registry = main.build_session_registry(seeded_gateway, storage, main.settings)
    main.app.dependency_overrides[main.get_sessions] = lambda: registry

    with TestClient(main.app) as c:
        yield c

    main.app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    resp = client.post("/auth/login", json={"email": "staff@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def failing_storage(tmp_path):
    return RecordingStorage(tmp_path / "denied", fail=True)
