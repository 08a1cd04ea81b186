"""
Pytest configuration and fixtures.

WHY: Fixtures provide reusable test setup/teardown logic, reducing
duplication and ensuring consistent test environments.
"""

import os

# Settings are read at import time; these must be set before receiptdesk loads
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-not-for-production")
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-secret")
os.environ.setdefault("FREELANCER_NAME", "Alex Freelancer")
os.environ.setdefault("FREELANCER_EMAIL", "alex@freelancer.test")
os.environ.setdefault("FREELANCER_PHONE", "+1 555 0100")
os.environ.setdefault("FREELANCER_ADDRESS", "1 Main Street, Springfield")
os.environ.setdefault("EMAIL_PROVIDER", "mock")
os.environ.setdefault("QR_STORAGE_ENABLED", "false")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from receiptdesk.core.auth import create_access_token
from receiptdesk.db.session import get_db
from receiptdesk.main import app
from receiptdesk.models import Base
from receiptdesk.services import email as email_module


# Test database URL
# WHY: Using SQLite for tests eliminates external database dependencies
# and makes tests faster.
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """
    Create a test database engine.

    WHY: Function scope ensures each test gets a fresh database state.
    StaticPool keeps one connection so the in-memory database survives
    across sessions of the same test.
    """
    engine = create_async_engine(
        TEST_ASYNC_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a test database session.

    Yields:
        AsyncSession: Database session for the test
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test HTTP client.

    WHY: AsyncClient allows testing FastAPI endpoints without running
    a real server. Requests share the test session so data created by a
    test is visible to the API and vice versa.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_token() -> str:
    return create_access_token({"email": "admin@freelancer.test", "type": "admin"})


@pytest.fixture
def admin_headers(admin_token: str) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def client_token_for():
    """Build a client-portal token for a given client id."""

    def _make(client_id: str) -> dict:
        token = create_access_token({"email": "client@example.com", "client_id": client_id})
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture(autouse=True)
def use_mock_email_provider():
    """
    Start every test with an empty mock outbox.

    WHY: Tests must not send real emails. EMAIL_PROVIDER=mock makes the
    global EmailService use MockEmailProvider, which records messages in a
    class-level list.
    """
    email_module.MockEmailProvider.clear_sent_emails()
    yield
    email_module.MockEmailProvider.clear_sent_emails()
