"""Pytest configuration and shared fixtures.

Tests run against SQLite in memory. The environment is set before the
application is imported so its settings and engine pick it up.
"""

import os


os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from collections.abc import AsyncGenerator  # noqa: E402
from uuid import UUID, uuid4  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from rolegate.core.database import Base, get_db  # noqa: E402
from rolegate.main import create_app  # noqa: E402
from scripts.seed import seed_rbac  # noqa: E402
from tests.factories.rbac import RBACBuilder, auth_headers_for  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide the session shared by fixtures and requests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Data fixtures
# ============================================================


@pytest.fixture
def rbac(db: AsyncSession) -> RBACBuilder:
    return RBACBuilder(db)


@pytest.fixture
async def seeded(db: AsyncSession) -> None:
    """Default permissions and roles, with every permission linked to admin."""
    await seed_rbac(db)


@pytest.fixture
async def admin_id(db: AsyncSession, seeded: None) -> UUID:
    """A principal holding the admin role."""
    user_id = uuid4()
    await seed_rbac(db, admin_user=user_id)
    return user_id


@pytest.fixture
def admin_headers(admin_id: UUID) -> dict[str, str]:
    return auth_headers_for(admin_id)


@pytest.fixture
async def admin_client(app, admin_headers) -> AsyncGenerator[AsyncClient, None]:
    """Provide an HTTP client authenticated as an administrator."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=admin_headers,
    ) as client:
        yield client
