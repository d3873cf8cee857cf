from contextlib import asynccontextmanager
from datetime import datetime, timezone
from uuid import uuid4

import asyncpg
import pytest
from fastapi.testclient import TestClient

from sitehire import database
from sitehire.database import get_store
from sitehire.errors import StoreError
from sitehire.main import app
from sitehire.store.postgres import PostgresStore


class FakeConnection:
    """Stands in for an asyncpg connection. Knows one user row, nothing else."""

    def __init__(self, user=None, error=None):
        self.user = user
        self.error = error
        self.queries = []

    async def fetchrow(self, query, *args):
        self.queries.append(query)
        if self.error:
            raise self.error
        if self.user and "FROM users" in query and str(args[0]) == self.user["id"]:
            return self.user
        return None

    async def fetch(self, query, *args):
        self.queries.append(query)
        if self.error:
            raise self.error
        return []

    async def fetchval(self, query, *args):
        self.queries.append(query)
        if self.error:
            raise self.error
        return 0


class FakePool:
    def __init__(self, conn):
        self.conn = conn
        self.acquired = 0

    @asynccontextmanager
    async def acquire(self):
        self.acquired += 1
        yield self.conn


def _user():
    return {
        "id": str(uuid4()),
        "email": "customer@example.com",
        "full_name": "Sara Al-Harbi",
        "phone": None,
        "role": "customer",
        "status": "active",
        "rating": 0,
        "total_reviews": 0,
        "avatar_url": None,
        "created_at": datetime(2026, 10, 1, tzinfo=timezone.utc),
    }


@pytest.mark.parametrize("bad_id", ["abc", "not-a-booking", "123", ""])
async def test_malformed_ids_read_as_missing(bad_id):
    pool = FakePool(FakeConnection())
    store = PostgresStore(pool)

    assert await store.get_booking(bad_id) is None
    assert await store.get_user(bad_id) is None
    assert await store.get_offer(bad_id) is None
    assert await store.transition_booking(bad_id, {"offer_accepted"}, "in_progress") is None
    assert await store.complete_booking(bad_id, {"in_progress"}) is None
    assert await store.list_customer_bookings(bad_id) == []
    assert await store.count_unread(bad_id) == 0
    assert pool.acquired == 0

    assert await store.settle_offer(str(uuid4()), bad_id, {"waiting_for_offers"}) is None
    assert await store.list_conversation_messages(str(uuid4()), bad_id) == []
    assert await store.list_transactions(bad_id) == []
    assert pool.conn.queries == []


async def test_malformed_ids_are_dropped_from_batch_reads():
    conn = FakeConnection()
    store = PostgresStore(FakePool(conn))

    assert await store.list_offers(["abc", "also-bad"]) == []
    assert await store.get_users(["abc"]) == []


async def test_driver_errors_become_store_errors():
    store = PostgresStore(FakePool(FakeConnection(error=asyncpg.InterfaceError("connection is closed"))))

    with pytest.raises(StoreError):
        await store.get_booking(str(uuid4()))

    store = PostgresStore(FakePool(FakeConnection(error=ConnectionResetError("reset by peer"))))
    with pytest.raises(StoreError):
        await store.list_bookings()


def test_malformed_booking_id_is_404_over_http(headers):
    user = _user()
    store = PostgresStore(FakePool(FakeConnection(user=user)))

    async def override_store():
        return store

    app.dependency_overrides[get_store] = override_store
    try:
        client = TestClient(app)
        malformed = client.get("/bookings/abc", headers=headers(user))
        missing = client.get(f"/bookings/{uuid4()}", headers=headers(user))
        bad_offer = client.post("/offers/abc/accept", headers=headers(user))
    finally:
        app.dependency_overrides.clear()

    assert malformed.status_code == 404
    assert missing.status_code == 404
    assert bad_offer.status_code == 404


async def _refuse_connection():
    raise ConnectionRefusedError("connection refused")


async def test_unreachable_database_is_store_error(monkeypatch):
    monkeypatch.setattr(database, "_store", None)
    monkeypatch.setattr(database.settings, "store_backend", "postgres")
    monkeypatch.setattr(database, "create_pool", _refuse_connection)

    with pytest.raises(StoreError):
        await database.get_store()
    assert database._store is None


def test_unreachable_database_is_500_over_http(monkeypatch):
    monkeypatch.setattr(database, "_store", None)
    monkeypatch.setattr(database.settings, "store_backend", "postgres")
    monkeypatch.setattr(database, "create_pool", _refuse_connection)
    app.dependency_overrides.clear()

    response = TestClient(app).get("/services/")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
