import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from smart_shopper.core.config import settings

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


async def connect_mongo() -> None:
    """Create the client; the server is only contacted on first use"""
    global _client, _db
    _client = AsyncIOMotorClient(settings.MONGO_URL, serverSelectionTimeoutMS=settings.MONGO_TIMEOUT_MS)
    _db = _client[settings.MONGO_DB_NAME]
    logger.info(f"MongoDB client ready for database '{settings.MONGO_DB_NAME}'")


async def ensure_indexes() -> None:
    """History reads filter by session and sort by time"""
    chat_messages = get_mongo_db()[settings.CHAT_MESSAGES_COLLECTION]
    await chat_messages.create_index([("session_id", ASCENDING), ("created_at", ASCENDING)])
    logger.info(f"✅ Indexes ensured on {settings.CHAT_MESSAGES_COLLECTION}")


async def close_mongo() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
        _client = None
        _db = None
        logger.info("MongoDB connection closed")


def get_mongo_db() -> AsyncIOMotorDatabase:
    if _db is None:
        raise RuntimeError("MongoDB not connected. Ensure connect_mongo() was called.")
    return _db


async def ping() -> None:
    """Raise if the database does not answer a ping"""
    await get_mongo_db().command("ping")
