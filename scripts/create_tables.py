"""Script to enable pgvector and create database tables from SQLAlchemy models."""

import asyncio
import sys

from pdfsearch.infrastructure.database.session import create_tables
from pdfsearch.infrastructure.logging import configure_logging, get_logger
from pdfsearch.modules.chunk.models import Chunk  # noqa: F401
from pdfsearch.modules.document.models import Document  # noqa: F401

logger = get_logger()


async def main() -> None:
    """Create database tables."""
    configure_logging()
    logger.info("Creating database tables...")

    try:
        await create_tables()
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
