import asyncio
import os
from datetime import date, time

# Settings are read at import time
os.environ.setdefault("DATABASE_USERNAME", "sitehire")
os.environ.setdefault("DATABASE_PASSWORD", "sitehire")
os.environ.setdefault("DATABASE_HOSTNAME", "localhost")
os.environ.setdefault("DATABASE_PORT", "5432")
os.environ.setdefault("DATABASE_NAME", "sitehire_test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("STORE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from sitehire.database import get_store
from sitehire.main import app
from sitehire.services import lifecycle
from sitehire.store.memory import InMemoryStore
from sitehire.utils.auth import create_access_token


class Factory:
    """Async helpers that seed an InMemoryStore"""

    def __init__(self, store):
        self.store = store
        self._count = 0

    async def user(self, role="customer", full_name=None, **extra):
        self._count += 1
        return await self.store.create_user({
            "email": f"{role}{self._count}@example.com",
            "full_name": full_name or f"{role.title()} {self._count}",
            "role": role,
            "status": "active",
            "password_hash": "not-a-real-hash",
            **extra,
        })

    async def service(self, name="Excavator - CAT 320", base_price=150.0, **extra):
        return await self.store.create_service({
            "name": name,
            "description": "Tracked excavator with operator",
            "category": "heavy_equipment",
            "base_price": base_price,
            "price_type": "hourly",
            **extra,
        })

    async def booking(self, customer, service=None, location="King Fahd Rd, Riyadh"):
        service = service or await self.service()
        return await lifecycle.create_booking(
            self.store,
            customer_id=customer["id"],
            service_id=service["id"],
            location=location,
            booking_date=date(2026, 11, 2),
            booking_time=time(8, 30),
            quantity=2,
            notes="Site gate on the north side",
        )

    async def offer(self, booking, driver, price=100.0, distance_km=4.5):
        return await lifecycle.submit_offer(self.store, booking["id"], driver["id"], price, distance_km)

    async def message(self, sender, recipient, booking, content, created_at=None, is_read=False):
        data = {
            "sender_id": sender["id"],
            "recipient_id": recipient["id"],
            "booking_id": booking["id"],
            "content": content,
            "is_read": is_read,
        }
        if created_at is not None:
            data["created_at"] = created_at
        return await self.store.create_message(data)


class SyncFactory:
    """Factory for tests that run outside an event loop"""

    def __init__(self, factory):
        self._factory = factory

    def __getattr__(self, name):
        method = getattr(self._factory, name)

        def call(*args, **kwargs):
            return asyncio.run(method(*args, **kwargs))
        return call


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def factory(store):
    return Factory(store)


@pytest.fixture
def seed(factory):
    return SyncFactory(factory)


@pytest.fixture
def client(store):
    async def override_store():
        return store

    app.dependency_overrides[get_store] = override_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user):
    token = create_access_token({"sub": user["id"], "role": user["role"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers
