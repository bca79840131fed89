#!/usr/bin/env python3
"""Initialize database tables and seed protocol configuration."""

import asyncio
import sys

# Add project root to path
sys.path.insert(0, "/app")

from loguru import logger

from app.config.database import create_engine, create_session_maker, init_db
from app.config.logging import setup_logging
from app.config.settings import settings
from app.services.protocol import TokenSaleProtocol

# Script logs go to stderr only
setup_logging(level="INFO", log_file="")


async def init_database() -> None:
    """Create all tables and bootstrap configuration rows."""
    logger.info("Connecting to database...")
    engine = create_engine(settings.database_url, echo=False)

    try:
        logger.info("Creating tables (checkfirst=True)...")
        await init_db(engine)

        protocol = TokenSaleProtocol(create_session_maker(engine))
        if await protocol.bootstrap():
            logger.success("Protocol configuration seeded")
        else:
            logger.info("Protocol already initialized, configuration left as is")
    finally:
        await engine.dispose()

    logger.success("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
