"""Destination engine management with async SQLAlchemy."""

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from channel_migrator.config import Settings

logger = structlog.get_logger(__name__)


def create_engine(settings: Settings, database_url: str | None = None) -> AsyncEngine:
    """Create the destination engine.

    A run holds a single connection for its whole duration, so no pool is kept.
    """
    url = database_url or str(settings.database_url)
    logger.info("Creating destination engine", database_url=url.split("@")[-1])
    return create_async_engine(url, echo=settings.db_echo, poolclass=NullPool)


async def check_connection(engine: AsyncEngine) -> None:
    """Fail fast when the destination is unreachable."""
    async with engine.connect() as conn:
        await conn.run_sync(lambda _: None)

    logger.info("Destination connection established")


async def close_engine(engine: AsyncEngine) -> None:
    """Dispose the engine at the end of a run."""
    logger.info("Closing destination engine")
    await engine.dispose()
