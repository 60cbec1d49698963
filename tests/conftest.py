"""Pytest fixtures for the discount and cart engine."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from caterpillar_ranch.core.config import Settings
from caterpillar_ranch.core.storage import InMemoryDurableStore
from caterpillar_ranch.database.products import ProductDatabase
from caterpillar_ranch.main import create_app
from caterpillar_ranch.services.store import RanchStore


class FakeClock:
    """Controllable stand-in for datetime.now(timezone.utc)"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, minutes: float = 0) -> None:
        self.now += timedelta(seconds=seconds, minutes=minutes)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 31, 23, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings() -> Settings:
    return Settings(data_dir=None, discount_ttl_minutes=30, tick_interval_seconds=3600)


@pytest.fixture
def durable_store() -> InMemoryDurableStore:
    return InMemoryDurableStore()


@pytest.fixture
def catalog() -> ProductDatabase:
    return ProductDatabase()


@pytest.fixture
def store(settings, durable_store, catalog, clock) -> RanchStore:
    return RanchStore(settings=settings, durable_store=durable_store, catalog=catalog, clock=clock)


@pytest.fixture
def session(store):
    return store.sessions.create_session()


@pytest.fixture
def shopper(store, session):
    return store.shopper("cart-1", session)


@pytest.fixture
def client(store) -> TestClient:
    return TestClient(create_app(store=store))
