"""Async engine, session factory and the request-scoped session dependency."""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Settings, settings
from models.base import Base

logger = logging.getLogger(__name__)


def resolve_database_url(config: Settings) -> str:
    """Test runs use TEST_DATABASE_URL when it is set."""
    url = config.test_database_url if config.is_testing and config.test_database_url else config.database_url
    url = (url or "").strip()
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not configured. Set it in the environment or .env file "
            "(e.g., DATABASE_URL=postgresql+asyncpg://<user>:<pass>@<host>/<db>)."
        )
    return url


def engine_options(url: str, config: Settings) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # aiosqlite connections are handed between threads by the driver
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": config.db_pool_size,
        "max_overflow": config.db_max_overflow,
        "pool_pre_ping": True,
    }


DB_URL = resolve_database_url(settings)

engine = create_async_engine(DB_URL, echo=settings.debug, **engine_options(DB_URL, settings))

AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)

__all__ = ["Base", "engine", "AsyncSessionLocal", "get_db", "check_database_connection"]


async def get_db() -> AsyncGenerator[AsyncSession, Any]:
    async with AsyncSessionLocal() as session:
        yield session


async def check_database_connection() -> bool:
    """Round-trip a trivial query; used by the health endpoint."""
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed: %s", e)
        return False
    return True
