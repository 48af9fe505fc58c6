from fastapi import APIRouter, Depends
from core.auth.dependencies import require_admin
from models.user_model import CurrentUser
from utils.image_cleanup import cleanup_orphaned_images

router = APIRouter()


@router.post("/images/reconcile")
async def reconcile_images(user: CurrentUser = Depends(require_admin)):
    """Destroy uploaded images no recipe references (same job the scheduler runs nightly)"""
    return await cleanup_orphaned_images()
