"""
MongoDB client configuration using the PyMongo async API.
"""
from typing import Optional
import logging

from pymongo import AsyncMongoClient, MongoClient
from pymongo.asynchronous.database import AsyncDatabase

from config import settings

logger = logging.getLogger(__name__)

# Process-wide client, created on first use
_client: Optional[AsyncMongoClient] = None


def _client_options() -> dict:
    return {
        "maxPoolSize": settings.MONGODB_MAX_POOL_SIZE,
        "minPoolSize": settings.MONGODB_MIN_POOL_SIZE,
        "serverSelectionTimeoutMS": settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        "socketTimeoutMS": settings.MONGODB_SOCKET_TIMEOUT_MS,
        "waitQueueTimeoutMS": settings.MONGODB_WAIT_QUEUE_TIMEOUT_MS,
        "heartbeatFrequencyMS": settings.MONGODB_HEARTBEAT_FREQUENCY_MS,
        "tz_aware": True,
    }


def get_client() -> AsyncMongoClient:
    """Return the shared async client, connecting lazily."""
    global _client
    if _client is None:
        _client = AsyncMongoClient(settings.MONGODB_URI, **_client_options())
        logger.info(f"MongoDB client created for database '{settings.MONGODB_DB}'")
    return _client


def get_database() -> AsyncDatabase:
    return get_client()[settings.MONGODB_DB]


async def get_db() -> AsyncDatabase:
    """
    Dependency for FastAPI to get the leaderboard database.

    Usage:
        @app.get("/items")
        async def read_items(db: AsyncDatabase = Depends(get_db)):
            ...
    """
    return get_database()


async def close_client():
    """Close the shared client (called on shutdown)."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
        logger.info("MongoDB client closed")


def create_sync_client() -> MongoClient:
    """Blocking client for Celery tasks, which run outside the event loop."""
    return MongoClient(settings.MONGODB_URI, **_client_options())
