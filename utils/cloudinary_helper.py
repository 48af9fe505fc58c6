"""
Cloudinary media host helpers for recipe images
"""
import logging
from typing import Dict, List, Optional

import cloudinary
import cloudinary.api
import cloudinary.uploader
from fastapi.concurrency import run_in_threadpool

from core.config import Settings, get_settings
from core.errors import StorageError
from utils.recipe_forms import ImageUpload

logger = logging.getLogger(__name__)


def configure_cloudinary(settings: Settings) -> None:
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True,
    )
    logger.info("Cloudinary configured successfully")


def public_id_from_url(image_url: str) -> Optional[str]:
    """
    Recover the public_id from a delivery URL:
    https://res.cloudinary.com/<cloud>/image/upload/v<version>/<public_id>.<ext>
    """
    if not image_url or "/upload/" not in image_url:
        return None
    path = image_url.split("/upload/", 1)[1]
    parts = path.split("/")
    if parts and parts[0].startswith("v") and parts[0][1:].isdigit():
        parts = parts[1:]
    if not parts:
        return None
    return "/".join(parts).rsplit(".", 1)[0]


async def upload_recipe_image(image: ImageUpload) -> Dict[str, str]:
    """
    Upload image bytes and return both secure_url and public_id
    """
    folder = get_settings().cloudinary_folder
    logger.info(f"Uploading image to cloud storage, folder: {folder}")
    try:
        result = await run_in_threadpool(
            cloudinary.uploader.upload,
            image.data,
            folder=folder,
            resource_type="image",
        )
    except Exception as e:
        logger.error(f"Image upload failed for {image.filename}: {e}")
        raise StorageError("Failed to upload image")

    return {"secure_url": result["secure_url"], "public_id": result["public_id"]}


async def delete_image(public_id: Optional[str] = None, image_url: Optional[str] = None) -> bool:
    """
    Remove an image from the media host. Failures are logged and reported
    as False, never raised: the recipe document is already updated.
    """
    public_id = public_id or public_id_from_url(image_url or "")
    if not public_id:
        return False
    try:
        result = await run_in_threadpool(cloudinary.uploader.destroy, public_id)
    except Exception as e:
        logger.error(f"Failed to delete Cloudinary image {public_id}: {e}")
        return False

    deleted = result.get("result") == "ok"
    if deleted:
        logger.info(f"Cloudinary image deleted: {public_id}")
    else:
        logger.warning(f"Cloudinary did not delete {public_id}: {result}")
    return deleted


async def list_folder_images(folder: str) -> List[Dict]:
    """All uploaded resources under a folder prefix, following pagination"""
    resources = []
    next_cursor = None
    while True:
        params = {"type": "upload", "prefix": folder, "max_results": 500}
        if next_cursor:
            params["next_cursor"] = next_cursor
        page = await run_in_threadpool(cloudinary.api.resources, **params)
        resources.extend(page.get("resources", []))
        next_cursor = page.get("next_cursor")
        if not next_cursor:
            return resources
