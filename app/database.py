"""
Database configuration and connection management.
Provides singleton Motor AsyncIOMotorClient for MongoDB.
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Optional
import logging
from .config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB connection manager with singleton pattern."""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect_db(cls) -> None:
        """
        Create database connection.
        Called on application startup.
        """
        try:
            logger.info("Connecting to MongoDB...")
            cls.client = AsyncIOMotorClient(
                settings.MONGODB_ATLAS_URI,
                maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
                minPoolSize=settings.MONGODB_MIN_POOL_SIZE,
                serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS
            )
            cls.db = cls.client[settings.DB_NAME]

            # Test connection
            await cls.client.admin.command('ping')
            logger.info(f"✅ Connected to MongoDB database: {settings.DB_NAME}")

            await cls._create_indexes()

        except Exception as e:
            logger.error(f"❌ Error connecting to MongoDB: {e}")
            raise

    @classmethod
    async def _create_indexes(cls) -> None:
        """Indici per le liste per utente e per il collegamento documento/calcolo."""
        try:
            await cls.db[Collections.CALCULATIONS].create_index("id", unique=True, name="idx_calc_id")
            await cls.db[Collections.CALCULATIONS].create_index(
                [("user_id", 1), ("created_at", -1)], name="idx_calc_user_created"
            )
            await cls.db[Collections.DOCUMENTS].create_index("id", unique=True, name="idx_doc_id")
            await cls.db[Collections.DOCUMENTS].create_index("calculation_id", name="idx_doc_calc")
            logger.info("✅ Database indexes created")
        except Exception as e:
            logger.warning(f"Index creation warning (may already exist): {e}")

    @classmethod
    async def close_db(cls) -> None:
        """
        Close database connection.
        Called on application shutdown.
        """
        if cls.client:
            logger.info("Closing MongoDB connection...")
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("✅ MongoDB connection closed")

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """
        Get database instance.

        Raises:
            RuntimeError: If database is not connected
        """
        if cls.db is None:
            raise RuntimeError("Database not initialized. Call connect_db() first.")
        return cls.db


# Collection name constants
class Collections:
    """MongoDB collection names."""
    USERS = "users"
    CALCULATIONS = "calculations"
    DOCUMENTS = "documents"
