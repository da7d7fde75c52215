"""
MongoDB database connection and utilities
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING, TEXT
from typing import Optional
import logging

from ...config import settings

logger = logging.getLogger(__name__)


class MongoDB:
    """MongoDB connection manager"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """Connect to MongoDB"""
        try:
            self.client = AsyncIOMotorClient(settings.MONGODB_URL)
            self.db = self.client[settings.MONGODB_DATABASE]
            await self.create_indexes()
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

        logger.info(f"Connected to MongoDB at {settings.MONGODB_URL}, database {settings.MONGODB_DATABASE}")

    async def disconnect(self):
        """Disconnect from MongoDB"""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    @property
    def users(self) -> AsyncIOMotorCollection:
        return self.db["users"]

    @property
    def posts(self) -> AsyncIOMotorCollection:
        return self.db["posts"]

    @property
    def comments(self) -> AsyncIOMotorCollection:
        return self.db["comments"]

    @property
    def replies(self) -> AsyncIOMotorCollection:
        return self.db["replies"]

    @property
    def relationships(self) -> AsyncIOMotorCollection:
        return self.db["relationships"]

    @property
    def notifications(self) -> AsyncIOMotorCollection:
        return self.db["notifications"]

    async def create_indexes(self):
        """Create database indexes"""
        await self.users.create_index("email", unique=True)
        await self.users.create_index([
            ("first_name", TEXT),
            ("last_name", TEXT),
            ("title", TEXT),
            ("company", TEXT),
            ("skills", TEXT),
        ])

        await self.posts.create_index([("author_id", ASCENDING), ("created_at", DESCENDING)])
        await self.posts.create_index([("created_at", DESCENDING)])
        await self.posts.create_index("hashtags")
        await self.posts.create_index("likes.user_id")
        await self.posts.create_index([("content", TEXT), ("hashtags", TEXT)])

        await self.comments.create_index([("post_id", ASCENDING), ("created_at", ASCENDING)])
        await self.replies.create_index([("comment_id", ASCENDING), ("created_at", ASCENDING)])
        await self.replies.create_index("post_id")

        await self.relationships.create_index(
            [("kind", ASCENDING), ("source_id", ASCENDING), ("target_id", ASCENDING)],
            unique=True,
        )
        # One follow per direction, one connection per unordered pair
        await self.relationships.create_index([("kind", ASCENDING), ("pair", ASCENDING)], unique=True)
        await self.relationships.create_index(
            [("kind", ASCENDING), ("target_id", ASCENDING), ("status", ASCENDING)]
        )

        await self.notifications.create_index([("recipient_id", ASCENDING), ("created_at", DESCENDING)])
        await self.notifications.create_index([("recipient_id", ASCENDING), ("is_read", ASCENDING)])
        await self.notifications.create_index(
            [("sender_id", ASCENDING), ("type", ASCENDING), ("recipient_id", ASCENDING)]
        )

        logger.info("MongoDB indexes created")


# Global MongoDB instance
mongodb = MongoDB()


async def get_database() -> MongoDB:
    """Dependency for getting the MongoDB connection manager"""
    return mongodb
