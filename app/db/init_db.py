"""
Create all tables for the configured DATABASE_URL (idempotent).

Usage:
  python -m app.db.init_db
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

# Imported for their side effect of registering tables on Base.metadata
import app.auth.models  # noqa: F401
import app.core.models  # noqa: F401
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import Base, engine

logger = logging.getLogger(__name__)


async def create_tables(db_engine: AsyncEngine) -> None:
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("tables_ready", extra={"tables": sorted(Base.metadata.tables)})


async def main() -> None:
    configure_logging(settings.log_level)
    await create_tables(engine)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
