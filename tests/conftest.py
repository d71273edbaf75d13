"""
Pytest fixtures for the user directory tests.
"""

import os
import tempfile
from datetime import date
from typing import AsyncGenerator, Dict, Optional

# Settings are read once and validated eagerly, so the environment must be
# in place before anything under src/ is imported.
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp.name}"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["REDIS_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import get_settings

get_settings.cache_clear()

from src.database import create_store_engine, get_db
from src.kernel.cache.redis import set_cache_backend
from src.kernel.errors import CacheUnavailable
from src.kernel.identity.auth_service import AuthService
from src.kernel.identity.jwt import TokenIssuer
from src.kernel.identity.password import PasswordHasher
from src.kernel.models.base import Base
from src.kernel.users.directory import CachedUserDirectory
from src.kernel.users.repository import UserRepository
from src.kernel.users.user_service import UserService
from src.main import app
from src.schemas.auth import RegisterRequest

TEST_SECRET_KEY = "test-secret-key-for-testing-only"
TEST_ISSUER = "UserDirectory"
TEST_AUDIENCE = "UserDirectory.Users"


class InMemoryCache:
    """
    CacheBackend test double.

    Records the TTL of every write and can be switched into a failing mode
    to simulate an unreachable cache.
    """

    def __init__(self) -> None:
        self.entries: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.fail = False
        self.writes = 0
        self.removes = 0

    def _check(self) -> None:
        if self.fail:
            raise CacheUnavailable("cache is down")

    async def get_string(self, key: str) -> Optional[str]:
        self._check()
        return self.entries.get(key)

    async def set_string(self, key: str, value: str, ttl_seconds: int) -> None:
        self._check()
        self.writes += 1
        self.entries[key] = value
        self.ttls[key] = ttl_seconds

    async def remove(self, key: str) -> None:
        self._check()
        self.removes += 1
        self.entries.pop(key, None)
        self.ttls.pop(key, None)


class CountingUserRepository(UserRepository):
    """UserRepository that counts primary-key lookups."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.find_by_id_calls = 0

    async def find_by_id(self, user_id):
        self.find_by_id_calls += 1
        return await super().find_by_id(user_id)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a file-backed SQLite engine per test."""
    engine = create_store_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def hasher() -> PasswordHasher:
    """Cheapest bcrypt cost so tests stay fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(
        secret_key=TEST_SECRET_KEY,
        issuer=TEST_ISSUER,
        audience=TEST_AUDIENCE,
    )


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def repository(db_session: AsyncSession) -> CountingUserRepository:
    return CountingUserRepository(db_session)


@pytest.fixture
def auth_service(repository, hasher, token_issuer) -> AuthService:
    return AuthService(repository, hasher, token_issuer)


@pytest.fixture
def directory(repository, cache) -> CachedUserDirectory:
    return CachedUserDirectory(repository, cache, ttl_seconds=30 * 60)


@pytest.fixture
def user_service(repository, directory) -> UserService:
    return UserService(repository, directory)


def make_register_request(**overrides) -> RegisterRequest:
    data = {
        "username": "alice",
        "email": "alice@x.com",
        "password": "pw123456",
        "first_name": "Alice",
        "last_name": "Smith",
        "date_of_birth": date(1990, 5, 17),
    }
    data.update(overrides)
    return RegisterRequest(**data)


@pytest.fixture
def register_request():
    """Factory for RegisterRequest objects; keyword overrides replace the alice defaults."""
    return make_register_request


@pytest.fixture
def alice_request() -> RegisterRequest:
    return make_register_request()


@pytest_asyncio.fixture
async def alice(auth_service: AuthService, alice_request: RegisterRequest):
    """Register alice and return the successful AuthResult."""
    result = await auth_service.register(alice_request)
    assert result.success, result.message
    return result


@pytest_asyncio.fixture
async def client(session_maker, cache) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client bound to the app in-process.

    Requests share the per-test database and the in-memory cache.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    set_cache_backend(cache)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    set_cache_backend(None)


async def register_via_api(client: AsyncClient, **overrides) -> dict:
    """POST a registration built from the alice defaults and return the JSON body."""
    payload = make_register_request(**overrides).model_dump(mode="json")
    response = await client.post("/api/v1/auth/register", json=payload)
    return response.json()


@pytest.fixture
def register_user():
    return register_via_api


def pytest_sessionfinish(session, exitstatus):
    """Clean up the temp DB file referenced by DATABASE_URL."""
    try:
        os.unlink(_tmp.name)
    except OSError:
        pass
