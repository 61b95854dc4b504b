import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

logger = logging.getLogger(__name__)


# Create database engine
async_engine = create_async_engine(
    settings.async_database_url,
    pool_size=15,
    max_overflow=15,
    pool_timeout=settings.DB_POOL_TIMEOUT,  # Seconds to wait for a pooled connection
    pool_recycle=180,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_async_session():
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

AsyncDBSession = Annotated[AsyncSession, Depends(get_async_session)]


async def ping_database(engine=None) -> bool:
    """Run a trivial query to check store connectivity."""
    engine = engine or async_engine
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return False


async def dispose_engine():
    await async_engine.dispose()
    logger.info("Database connection pool closed")
