#   __          __ _    _  ______  ______  _       __  __            _______  ______
#   \ \        / /| |  | ||  ____||  ____|| |     |  \/  |    /\    |__   __||  ____|
#    \ \  /\  / / | |__| || |__   | |__   | |     | \  / |   /  \      | |   | |__
#     \ \/  \/ /  |  __  ||  __|  |  __|  | |     | |\/| |  / /\ \     | |   |  __|
#      \  /\  /   | |  | || |____ | |____ | |____ | |  | | / ____ \    | |   | |____
#       \/  \/    |_|  |_||______||______||______||_|  |_|/_/    \_\   |_|   |______|
#

# Database - MongoDB connection management and indexing.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# Database.connect: Establishes connection to MongoDB.
# Database.disconnect: Closes connection.
# Database.create_indexes: Creates required indexes for collections.
# Database.check_health: Checks database connectivity.
# Database.get_db: Returns the database instance.
# get_db: Shortcut used by services.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# logger: Logger instance.
# Database: Static class managing the MongoDB client and database connection.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# motor.motor_asyncio: Async MongoDB driver.
# pymongo: Index directions.
# typing: Type hints.
# logging: Logging.
# wheelmate.config.get_settings: App settings.

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from typing import Optional
import logging

from wheelmate.config import get_settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager"""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect(cls) -> None:
        """Establish connection to MongoDB"""
        settings = get_settings()
        try:
            cls.client = AsyncIOMotorClient(
                settings.mongodb_uri,
                serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
                tz_aware=True,
            )
            cls.db = cls.client[settings.mongodb_database]

            # Verify connection
            await cls.client.admin.command('ping')
            logger.info(f"Connected to MongoDB: {settings.mongodb_database}")

            await cls.create_indexes(cls.db)

        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    @classmethod
    async def disconnect(cls) -> None:
        """Close MongoDB connection"""
        if cls.client:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("Disconnected from MongoDB")

    @staticmethod
    async def create_indexes(db: AsyncIOMotorDatabase) -> None:
        """Create necessary indexes for collections"""
        # Facilities collection indexes
        await db.facilities.create_index("facility_id", unique=True)
        # Feed is always newest first
        await db.facilities.create_index([("created_at", DESCENDING)])
        await db.facilities.create_index([("type", ASCENDING)])

        # Users collection indexes
        await db.users.create_index("user_id", unique=True)
        await db.users.create_index("username", unique=True)

        logger.info("Database indexes created")

    @classmethod
    async def check_health(cls) -> bool:
        """Check if database connection is alive"""
        if cls.client is None:
            return False
        try:
            await cls.client.admin.command('ping')
            return True
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Get database instance"""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call Database.connect() first.")
        return cls.db


def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return Database.get_db()

