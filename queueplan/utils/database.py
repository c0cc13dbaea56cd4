"""
Database utilities and connection management
Async engine/session plumbing shared by the API, migrations and tests
"""

import os
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

DEFAULT_DATABASE_URL = "postgresql+asyncpg://localhost:5432/queueplan_db"


def get_database_url() -> str:
    """Database URL from environment"""
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an async engine; pooling options only apply to server databases"""
    options = {"echo": os.getenv("DEBUG", "false").lower() == "true"}
    if not url.startswith("sqlite"):
        options.update(pool_pre_ping=True, pool_recycle=300)
    options.update(kwargs)
    return create_async_engine(url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; objects stay readable after commit"""
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(get_database_url())
AsyncSessionLocal = build_session_factory(engine)


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_tables(bind: AsyncEngine = None):
    """Create all subscription engine tables"""
    # Import models so they register with Base.metadata
    from queueplan import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
