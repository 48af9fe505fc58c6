"""
Named sequence counters backed by the `counters` collection
"""
import logging

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from core.errors import StorageError
from database.mongo import counters_collection

logger = logging.getLogger(__name__)

RECIPE_COUNTER = "recipeId"


async def next_sequence_value(counter_name: str) -> int:
    """
    Atomically increment and return the named sequence.
    The first call for a name returns 1.
    """
    try:
        # Single $inc upsert: concurrent callers never read the same value
        counter = await counters_collection.find_one_and_update(
            {"_id": counter_name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError as e:
        logger.error(f"Failed to allocate next value for counter {counter_name}: {e}")
        raise StorageError("Failed to allocate recipe ID")

    return int(counter["seq"])
