import os
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool


engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[sessionmaker] = None
Base = declarative_base()


def _normalize_url(database_url: str) -> str:
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://") and "+aiosqlite" not in database_url:
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def get_engine() -> AsyncEngine:
    """Return a lazily created SQLAlchemy engine.

    The engine is built on first use from ``DATABASE_URL`` so that importing
    this module has no side effects and tests can point it elsewhere at
    runtime. A ``RuntimeError`` is raised if ``DATABASE_URL`` is not set.
    """

    global engine, AsyncSessionLocal

    if engine is None:
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL environment variable is required")
        database_url = _normalize_url(database_url)

        engine_kwargs = {"echo": False}

        if database_url.startswith("sqlite+aiosqlite://"):
            # In-memory SQLite must reuse the same connection to persist schema/data.
            if ":memory:" in database_url:
                engine_kwargs["poolclass"] = StaticPool
            else:
                engine_kwargs["poolclass"] = NullPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        engine = create_async_engine(database_url, **engine_kwargs)
        AsyncSessionLocal = sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    return engine


def get_session_factory() -> sessionmaker:
    """Session factory for code running outside a request, e.g. sync backends."""

    if AsyncSessionLocal is None:
        get_engine()
    assert AsyncSessionLocal is not None  # for type checkers
    return AsyncSessionLocal


async def get_session() -> AsyncSession:
    """Provide a database session for FastAPI dependencies."""

    async with get_session_factory()() as session:
        yield session


async def create_schema() -> None:
    """Create every table from the ORM metadata (no migrations)."""

    from . import models  # noqa: F401  register tables

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
