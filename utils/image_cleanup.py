"""
Out-of-band reconciliation between recipe documents and the media host.

Recipe writes and image deletions are not atomic, so a crash between them
can leave an uploaded image that no recipe references. This job finds such
images under the recipe folder and destroys them once they are older than
the grace period (fresh uploads may still be waiting for their insert).
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Set

from core.config import get_settings
from database.mongo import recipe_collection
from utils.cloudinary_helper import delete_image, list_folder_images, public_id_from_url

logger = logging.getLogger(__name__)


def _parse_created_at(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


async def referenced_public_ids() -> Set[str]:
    referenced = set()
    cursor = recipe_collection.find({}, {"image_public_id": 1, "image_url": 1})
    async for recipe in cursor:
        public_id = recipe.get("image_public_id") or public_id_from_url(recipe.get("image_url") or "")
        if public_id:
            referenced.add(public_id)
    return referenced


async def cleanup_orphaned_images(now: Optional[datetime] = None) -> Dict[str, Any]:
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=settings.image_cleanup_grace_hours)

    stats = {"scanned": 0, "orphaned": 0, "deleted": 0, "skipped_recent": 0, "errors": []}

    try:
        images = await list_folder_images(settings.cloudinary_folder)
        referenced = await referenced_public_ids()
    except Exception as e:
        logger.error(f"❌ Image reconciliation aborted: {e}")
        stats["errors"].append(str(e))
        return stats

    for image in images:
        stats["scanned"] += 1
        public_id = image.get("public_id")
        if not public_id or public_id in referenced:
            continue

        stats["orphaned"] += 1
        created_at = _parse_created_at(image.get("created_at"))
        if created_at is None or created_at > cutoff:
            stats["skipped_recent"] += 1
            continue

        if await delete_image(public_id=public_id):
            stats["deleted"] += 1
        else:
            stats["errors"].append(f"Failed to delete {public_id}")

    logger.info(f"✅ Image reconciliation completed: {stats}")
    return stats
