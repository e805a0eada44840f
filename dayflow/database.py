"""
DAYFLOW Planner API - Database Module

MongoDB connection management using Motor (async driver).
All record-store access goes through the repositories built on this handle.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from dayflow.config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure query indexes exist."""
        self.client = AsyncIOMotorClient(settings.MONGODB_URI)
        self.db = self.client[settings.MONGODB_DATABASE]
        await self.ensure_indexes()
        logger.info(f"Connected to MongoDB database '{settings.MONGODB_DATABASE}'")

    async def ensure_indexes(self) -> None:
        """Create the indexes backing the day-planning queries."""
        db = self.get_database()
        await db["tasks"].create_index([("owner_id", 1), ("scheduled_date", 1)])
        await db["tasks"].create_index([("owner_id", 1), ("type", 1), ("status", 1)])
        await db["tasks"].create_index([("owner_id", 1), ("status", 1), ("completed_at", -1)])
        await db["schedules"].create_index([("user_id", 1), ("date", 1)], unique=True)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None

    def get_database(self) -> AsyncIOMotorDatabase:
        """Get the database instance."""
        if self.db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.db


# Singleton database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get the database instance."""
    return database.get_database()
