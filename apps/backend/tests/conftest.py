import os
import sys

import pytest
import pytest_asyncio
import sqlalchemy
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

# Add parent directory to path to allow importing catalog, models and main
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catalog.cache import InMemoryResponseCache
from catalog.models import SourcePlatform
from catalog.store import CatalogStore
from database import build_session_factory, init_db

from fakes import FakeProvider


@pytest_asyncio.fixture(name="engine")
async def engine_fixture():
    # TEST_DATABASE_URL runs the suite against a disposable PostgreSQL database;
    # otherwise one shared in-memory SQLite connection per test
    test_url = os.environ.get("TEST_DATABASE_URL", "")
    if test_url:
        test_engine = create_async_engine(test_url, future=True, poolclass=NullPool)
        async with test_engine.begin() as conn:
            await conn.execute(sqlalchemy.text("DROP SCHEMA public CASCADE"))
            await conn.execute(sqlalchemy.text("CREATE SCHEMA public"))
    else:
        test_engine = create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture(name="session_factory")
def session_factory_fixture(engine):
    return build_session_factory(engine)


@pytest.fixture(name="store")
def store_fixture(session_factory):
    return CatalogStore(session_factory)


@pytest.fixture(name="response_cache")
def response_cache_fixture():
    return InMemoryResponseCache(max_entries=64, ttl_seconds=60)


@pytest.fixture(name="providers")
def providers_fixture():
    return {
        SourcePlatform.LOCAL_STORE: FakeProvider(SourcePlatform.LOCAL_STORE),
        SourcePlatform.MODRINTH: FakeProvider(SourcePlatform.MODRINTH),
        SourcePlatform.CURSEFORGE: FakeProvider(SourcePlatform.CURSEFORGE),
    }


@pytest_asyncio.fixture(name="client")
async def client_fixture(store, session_factory, providers, response_cache):
    from database import get_session
    from dependencies import get_catalog_providers, get_catalog_store, get_response_cache
    from main import app

    async def get_session_override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_catalog_store] = lambda: store
    app.dependency_overrides[get_catalog_providers] = lambda: providers
    app.dependency_overrides[get_response_cache] = lambda: response_cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
