"""Database engine and session configuration."""

import os

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from thelist.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _database_url() -> str:
    """Database URL from the environment (Alembic) or the app config."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    from thelist.config import config
    return config.database_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite connections enforce foreign keys.

    Args:
        database_url: SQLAlchemy URL (e.g. sqlite+aiosqlite:///./thelist.db)
        echo: Log SQL statements

    Returns:
        Configured AsyncEngine
    """
    engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)
    if database_url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def get_engine() -> AsyncEngine:
    """Get or create the application database engine."""
    global _engine

    if _engine is None:
        database_url = _database_url()
        echo = os.getenv("LOG_LEVEL", "INFO").upper() == "DEBUG"
        logger.info(f"Creating database engine for {database_url}")
        _engine = create_engine_for(database_url, echo=echo)

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _session_factory


async def ensure_schema(engine: AsyncEngine | None = None) -> None:
    """Create all tables if missing (idempotent dev convenience)."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def close_engine() -> None:
    """Close the database engine and dispose connections."""
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database engine")
        await _engine.dispose()
        _engine = None
        _session_factory = None
