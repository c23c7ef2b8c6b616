"""Pytest configuration and fixtures."""
import os
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("TIMEZONE", "UTC")

from app.utils.clock import Clock  # noqa: E402

TZ = ZoneInfo("UTC")


class FixedClock(Clock):
    """Clock that returns a settable instant."""

    def __init__(self, now: datetime):
        super().__init__(now.tzinfo or TZ)
        self.current = now if now.tzinfo else now.replace(tzinfo=TZ)

    def now(self) -> datetime:
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now if now.tzinfo else now.replace(tzinfo=TZ)


@pytest.fixture
def make_clock():
    """Factory for clocks frozen at a given time (naive values are UTC)."""
    return FixedClock


@pytest.fixture
def mock_db():
    """
    MagicMock database whose collections are AsyncMocks keyed by name.

    Access collections in tests as mock_db.collections["time_entries"].
    """
    db = MagicMock()
    db.collections = {}

    def get_collection(name):
        if name not in db.collections:
            db.collections[name] = AsyncMock()
        return db.collections[name]

    db.__getitem__.side_effect = get_collection
    return db


@pytest.fixture
def stub_find():
    """Make collection.find() return a sortable cursor over docs."""

    def stub(collection, docs):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.to_list = AsyncMock(return_value=docs)
        collection.find = MagicMock(return_value=cursor)
        return cursor

    return stub


@pytest.fixture
def email_service():
    """Email service stub reporting success."""
    service = MagicMock()
    service.send = AsyncMock(return_value=True)
    return service


@pytest_asyncio.fixture
async def app_client(mock_db, email_service, make_clock):
    """
    Async HTTP client with the database, clock, email service and caller
    identity replaced by test doubles.

    The clock is frozen at 2024-01-03 10:00 UTC (a Wednesday) and the
    caller is "user123"; both are exposed on the client for tests.
    """
    from app.database import get_database
    from app.main import app
    from app.routers.auth import get_current_user_id
    from app.services.email_service import get_email_service
    from app.utils.clock import get_clock

    clock = make_clock(datetime(2024, 1, 3, 10, 0))

    async def override_database():
        return mock_db

    app.dependency_overrides[get_database] = override_database
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_current_user_id] = lambda: "user123"

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        client.db = mock_db
        client.clock = clock
        client.email_service = email_service
        yield client

    app.dependency_overrides.clear()
