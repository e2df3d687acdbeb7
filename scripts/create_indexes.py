"""
Database Index Creation Script

Creates the MongoDB indexes the API relies on.
Run this script after deployment or when setting up a new database.
"""

import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorClient

from wheelmate.config import get_settings
from wheelmate.database import Database

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def create_indexes():
    """Create all necessary indexes for optimal query performance."""
    settings = get_settings()
    client = AsyncIOMotorClient(
        settings.mongodb_uri, serverSelectionTimeoutMS=settings.mongodb_timeout_ms
    )
    db = client[settings.mongodb_database]

    logger.info(f"Creating indexes on {settings.mongodb_database}...")
    try:
        await Database.create_indexes(db)
    finally:
        client.close()

    logger.info("All indexes created successfully!")


if __name__ == "__main__":
    asyncio.run(create_indexes())
