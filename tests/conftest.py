"""Common fixtures: in-memory SQLite database, controllable clock, identities."""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["MAINTENANCE_INTERVAL_SECONDS"] = "0"

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import doccollab.db.models  # noqa: F401
from doccollab.core.auth import Identity
from doccollab.core.config import settings
from doccollab.core.db import Base, get_db


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 14, 9, 30))


@pytest.fixture
def alice():
    return Identity(user_id="alice", display_name="Alice")


@pytest.fixture
def bob():
    return Identity(user_id="bob", display_name="Bob")


@pytest.fixture
def carol():
    return Identity(user_id="carol", display_name="Carol")


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    from doccollab.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def issue_token(claims: dict, expires_in: timedelta = timedelta(hours=1)) -> str:
    """Token as an external identity provider would issue it."""
    payload = dict(claims, exp=datetime.now(timezone.utc) + expires_in)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth_headers(user_id: str, name: str = None) -> dict:
    claims = {"sub": user_id}
    if name:
        claims["name"] = name
    return {"Authorization": f"Bearer {issue_token(claims)}"}


@pytest.fixture
def auth():
    return auth_headers
