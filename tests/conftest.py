"""Pytest fixtures and configuration."""

import os
from collections.abc import AsyncGenerator, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing the app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-at-least-32-characters-long")
os.environ.setdefault("DEBUG", "true")
os.environ["SMTP_HOST"] = ""

import chirper.models  # noqa: F401
from chirper.database import Base, get_db
from chirper.main import app
from chirper.services.mailer import Mailer, get_mailer


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Create a mock database session."""
    mock_session = AsyncMock()
    mock_session.add = MagicMock()
    mock_session.flush = AsyncMock()
    mock_session.refresh = AsyncMock()
    return mock_session


@pytest.fixture
def mock_mailer() -> MagicMock:
    """Create a mock mailer that records sends instead of delivering them."""
    mailer = MagicMock(spec=Mailer)
    mailer.send = AsyncMock()
    mailer.send_verification = AsyncMock()
    return mailer


@pytest.fixture
def override_deps(mock_db_session: AsyncMock, mock_mailer: MagicMock) -> Iterator[None]:
    """Route the app's database and mailer dependencies to the mocks."""

    async def override_get_db():
        yield mock_db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mock_mailer
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def unraised_client() -> AsyncGenerator[AsyncClient]:
    """Client that returns the app's 500 response instead of re-raising the error."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def sqlite_db(mock_mailer: MagicMock) -> AsyncGenerator[async_sessionmaker[AsyncSession]]:
    """Serve requests from a fresh in-memory SQLite database.

    The mailer stays mocked so registration hashes can be read from its calls.
    """
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mock_mailer
    try:
        yield session_factory
    finally:
        app.dependency_overrides.clear()
        await engine.dispose()
