# async engine + session helpers shared by every sqlalchemy-backed store
from contextlib import asynccontextmanager
from typing import AsyncIterator
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from mini_assistant.common.logging.logger import logger

def _engine_kwargs(db_url: str, pool_size: int, max_overflow: int) -> dict:
    """
    Pool settings only apply to server databases.
    NOTE: sqlite (aiosqlite) picks its own pool class and rejects pool_size/max_overflow.
    """
    if db_url.startswith("sqlite"):
        return {}
    return {"pool_size": pool_size, "max_overflow": max_overflow, "pool_pre_ping": True}

def create_db_engine(db_url: str, pool_size: int = 5, max_overflow: int = 10) -> AsyncEngine:
    return create_async_engine(db_url, **_engine_kwargs(db_url, pool_size, max_overflow))

@asynccontextmanager
async def create_db_engine_context(db_url: str, pool_size: int = 5, max_overflow: int = 10) -> AsyncIterator[AsyncEngine]:
    """
    Engine lifetime bound to an async context, so the lifespan exit stack disposes it on shutdown.
    """
    engine = create_db_engine(db_url, pool_size=pool_size, max_overflow=max_overflow)
    logger.info(f"Database engine created for dialect '{engine.dialect.name}'.")
    try:
        yield engine
    finally:
        await engine.dispose()
        logger.info(f"Database engine for dialect '{engine.dialect.name}' disposed.")

def get_async_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False so ORM rows can be read after the session closes
    return async_sessionmaker(engine, expire_on_commit=False)
