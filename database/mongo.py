import logging

import motor.motor_asyncio
from pymongo import ASCENDING, DESCENDING

from core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# ASYNC MongoDB client (Motor); connects lazily on first operation
client = motor.motor_asyncio.AsyncIOMotorClient(
    settings.mongodb_uri,
    tls=settings.mongodb_tls,
    serverSelectionTimeoutMS=30000,
)
db = client[settings.database_name]

users_collection = db["users"]
recipe_collection = db["recipes"]
counters_collection = db["counters"]


async def ensure_indexes():
    """
    Create the unique indexes the API relies on
    """
    try:
        await users_collection.create_index("username", unique=True)
        await recipe_collection.create_index("id", unique=True)
        await recipe_collection.create_index("created_by")
        await recipe_collection.create_index([("created_at", DESCENDING)])
        await recipe_collection.create_index([("name", ASCENDING), ("cuisine", ASCENDING)])
        logger.info("✅ MongoDB indexes ensured")
    except Exception as e:
        logger.warning(f"⚠️ Index creation failed (may already exist): {e}")
