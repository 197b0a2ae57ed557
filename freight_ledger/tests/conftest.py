"""
Centralized Test Configuration.
"""

import httpx
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from freight_ledger.app.main import app
from freight_ledger.app.db.session import get_db, Base
from freight_ledger.app.core.redis_client import get_redis
from freight_ledger.app.core.reliability import CircuitBreaker
from freight_ledger.app.services.exchange_rates import ExchangeRateClient, get_exchange_rate_client

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# Published rates used by the mocked exchange-rate source
RATE_PAYLOAD = {
    "datetime": {"date": "15/03/2025", "time": "09:00 AM"},
    "monitors": {
        "bcv": {"price": 36.5, "last_update": "15/03/2025, 09:00 AM"},
        "enparalelovzla": {"price": 40.0, "last_update": "15/03/2025, 08:30 AM"},
    },
}


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


class RateSource:
    """Scriptable stand-in for the exchange-rate HTTP API."""

    def __init__(self, payload=None):
        self.payload = payload or RATE_PAYLOAD
        self.status_code = 200
        self.calls = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"detail": "upstream error"})
        return httpx.Response(200, json=self.payload)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture
def rate_source():
    return RateSource()


@pytest.fixture
def rate_client(mock_redis, rate_source):
    """Exchange-rate client wired to the mock source, cache and a fresh breaker."""
    return ExchangeRateClient(
        redis=mock_redis,
        http_client=rate_source.client(),
        breaker=CircuitBreaker(failure_threshold=2, reset_timeout=60),
    )


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(autouse=True)
def apply_overrides(mock_redis, rate_client):
    """Route the app's DB, Redis and rate-source dependencies to test doubles."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_redis():
        return mock_redis

    async def override_get_exchange_rate_client():
        return rate_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_exchange_rate_client] = override_get_exchange_rate_client
    yield
    app.dependency_overrides = {}


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def session_factory():
    return TestingSessionLocal
