"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from freight_ledger.app.main import app
from freight_ledger.app.db.session import get_db, Base
from freight_ledger.app.core.jwt import create_user_token
from freight_ledger.app.domain.ledger.standard_chart import ensure_journal_counter, seed_standard_chart
from freight_ledger.app.models.chart_of_accounts import Account
from freight_ledger.app.models.enums import UserRole
from freight_ledger.app.models.user import User
import freight_ledger.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def setex(self, key, ttl, value):
        return await self.set(key, value, ex=ttl)

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture
def mock_redis():
    """Swap the module-level Redis client for an in-memory one."""
    redis = MockRedis()
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis
    yield redis
    redis_client_module.redis_client = original_client


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# Shared session for fixture data creation
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, mock_redis):
    """Async client for testing, wired to the test database and Redis."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# Ledger fixtures

@pytest.fixture
async def chart(db_session):
    """Standard chart plus journal counter. Returns {account_code: id}."""
    await seed_standard_chart(db_session)
    await ensure_journal_counter(db_session)
    result = await db_session.execute(select(Account.account_code, Account.id))
    return {code: account_id for code, account_id in result.all()}


async def _make_user(db_session, username: str, role: UserRole) -> User:
    user = User(email=f"{username}@test.local", username=username, role=role, is_active=True)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session):
    return await _make_user(db_session, "admin", UserRole.ADMIN)


@pytest.fixture
async def accountant_user(db_session):
    return await _make_user(db_session, "accountant", UserRole.ACCOUNTANT)


@pytest.fixture
async def employee_user(db_session):
    return await _make_user(db_session, "employee", UserRole.EMPLOYEE)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def accountant_headers(accountant_user):
    return auth_headers(accountant_user)


@pytest.fixture
def employee_headers(employee_user):
    return auth_headers(employee_user)
