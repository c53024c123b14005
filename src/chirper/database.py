"""Async SQLAlchemy engine, session factory and request-scoped sessions."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from chirper.config import get_settings


class Base(DeclarativeBase):
    """Declarative base shared by the users and tweets tables."""


settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def create_tables() -> None:
    """Create missing tables; used for local SQLite runs without Alembic."""
    # Register the mapped classes on Base.metadata
    import chirper.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Yield a session for one request.

    Commits when the handler returns and rolls back when it raises, so a
    failed email dispatch after an insert leaves nothing behind.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
