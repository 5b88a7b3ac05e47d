"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Keep the application engine off the filesystem; tests use their own engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

import itertools
import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Base, Order, OrderItem
from shared.infrastructure.db import get_db
from shared.rate_limit import limiter
from shared.utils.schemas import OrderOutput


# ID counter for orders created directly in the database
_id_counter = itertools.count(1000)


def next_id() -> int:
    """Get next unique ID for test entities."""
    return next(_id_counter)


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    Entering the client runs the lifespan, which creates the publisher registry.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def registry(client):
    """The publisher registry owned by the running app."""
    return client.app.state.publisher_registry


@pytest.fixture
def make_order(db_session):
    """Insert an order directly, bypassing checkout."""

    def _make_order(
        status: str = "new",
        items: list[tuple[str, int, float]] | None = None,
        **fields,
    ) -> Order:
        items = items if items is not None else [("Burger", 2, 6.5)]
        order = Order(
            id=next_id(),
            status=status,
            total=round(sum(qty * price for _, qty, price in items), 2),
            **fields,
        )
        order.items = [
            OrderItem(position=i, title=title, qty=qty, price=price)
            for i, (title, qty, price) in enumerate(items)
        ]
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return _make_order


def make_snapshot(order_id: int = 42, status: str = "new", **fields) -> OrderOutput:
    """Build an order snapshot as carried by live events."""
    data = {
        "id": order_id,
        "status": status,
        "created_at": T0,
        "total": 13.0,
        "items": [{"title": "Burger", "qty": 2, "price": 6.5}],
    }
    data.update(fields)
    return OrderOutput.model_validate(data)


@pytest.fixture
def checkout_body():
    return {
        "items": [
            {"title": "Burger", "qty": 2, "price": 6.5},
            {"title": "Fries", "qty": 1, "price": 2.75},
        ],
        "customer": {"name": "Sam Taylor", "phone": "07700900123"},
        "delivery_type": "pickup",
    }


@pytest.fixture
def utc_now():
    return T0 + timedelta(minutes=10)


class RecordingSink:
    """Subscriber sink that records frames and can be told to fail."""

    def __init__(self, fail: bool = False):
        self.frames: list[str] = []
        self.attempts = 0
        self.fail = fail
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, frame: str) -> None:
        self.attempts += 1
        if self.fail:
            raise BrokenPipeError("client went away")
        self.frames.append(frame)

    def close(self) -> None:
        self._closed = True

    @property
    def events(self) -> list[dict]:
        """Decoded payloads of the recorded frames."""
        return [json.loads(frame[len("data: "):]) for frame in self.frames]


@pytest.fixture
def recorder(registry) -> RecordingSink:
    """A sink subscribed to the running app's registry."""
    sink = RecordingSink()
    registry.subscribe(sink)
    return sink
