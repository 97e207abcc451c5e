from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, AsyncAttrs, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings
from app.core.logger import logger


class Base(AsyncAttrs, DeclarativeBase):
    pass


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create the async engine for a database URL.

    SQLite pools take neither pool_size nor max_overflow, so pool sizing is
    applied to server databases only.
    """
    engine_kwargs = {"echo": settings.DB_ECHO}
    if not database_url.startswith("sqlite"):
        engine_kwargs.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,
        })
    return create_async_engine(url=database_url, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL)
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_models() -> None:
    """Create the student and exam_detail tables if they are missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug(f"[DATABASE] Tables ensured: {', '.join(sorted(Base.metadata.tables))}")


async def close_engine() -> None:
    await engine.dispose()
    logger.debug("[DATABASE] Engine disposed")


async def get_db() -> AsyncGenerator[AsyncSession | Any, Any]:
    """Request-scoped session; whatever a failed request left pending is rolled back."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.debug("[DATABASE] Session rolled back after a failed request")
            raise
