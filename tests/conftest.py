"""Shared fixtures: a controllable clock and an API client on an in-memory DB."""

from __future__ import annotations

import time

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from otp_auth.config import Settings
from otp_auth.database.engine import get_session
from otp_auth.main import create_app
from otp_auth.models.user import Base

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
TEST_PHONE = "09123456789"


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: float | None = None) -> None:
        self.now = float(int(time.time()) - 60) if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        secret_key=TEST_SECRET,
        access_expiry="15m",
    )


# ── In-memory test database shared by every session ──────
@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://", echo=False, poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def app(test_settings, session_factory):
    """Application wired to the in-memory database (lifespan not run)."""
    application = create_app(test_settings)

    async def _session():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_session] = _session
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
