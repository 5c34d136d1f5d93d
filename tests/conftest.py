"""
Test infrastructure for the Blog Post API.

Strategy
--------
- SQLite in-memory via aiosqlite; StaticPool keeps every task on the same
  connection, since an in-memory database is connection-scoped.
- The app's get_db dependency is overridden with the test session factory.
- Tables are created fresh before each test and dropped after.
- Redis is disabled by setting cache._redis = None; the CacheManager then
  reports misses and skips writes, so every request hits the database.
- ``auth_headers`` mints bearer tokens with the app's own signing key, the
  same way the external user service would.
"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth import Requester, create_access_token
from app.cache import cache
from app.database import Base, commit, get_db
from app.main import app
from app.middleware import install_query_counter

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await commit(session)
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    cache._redis = None
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    """Return a factory producing Authorization headers for a given user."""
    def _headers(user_id: str, is_admin: bool = False) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id, is_admin=is_admin)}"}
    return _headers


@pytest.fixture
def author() -> Requester:
    return Requester(id="u1")


@pytest.fixture
def admin() -> Requester:
    return Requester(id="admin-1", is_admin=True)
