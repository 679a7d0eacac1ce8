import os

os.environ.setdefault("TELEMETRY_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("INTERNAL_ADMIN_KEY", "test-internal")
os.environ.setdefault("SESSION_TOKEN_PEPPER", "test-pepper")

import pytest
import httpx

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

# Import Base + all models so metadata is complete
import listings_hub.models  # noqa: F401
from listings_hub.models.base import Base

from listings_hub.main import app
from listings_hub.core.db import get_db
from listings_hub.services.storage import LocalObjectStore, get_object_store

from fixtures_seed import seed_geo, seed_users  # noqa: F401


def _test_db_url(tmp_path) -> str:
    # Postgres when provided, otherwise a throwaway sqlite file per test
    return os.getenv("DATABASE_URL_TEST") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
async def async_engine(tmp_path):
    engine = create_async_engine(_test_db_url(tmp_path), poolclass=NullPool)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(bind=async_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def media_store(tmp_path) -> LocalObjectStore:
    return LocalObjectStore(str(tmp_path / "media"))


@pytest.fixture
async def client(session_factory, media_store):
    """
    HTTP client whose requests each get their own session on the test DB.
    """
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_object_store] = lambda: media_store

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
