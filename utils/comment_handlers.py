"""
Comment Route Handlers
Comments live inside their recipe document; every change recomputes the
recipe rating in the same write.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from pymongo.errors import PyMongoError

from core.auth.permissions import ensure_can_delete_comment
from core.errors import StorageError, ValidationError
from database.mongo import recipe_collection
from models.comment_model import MAX_COMMENT_LENGTH, CommentIn
from models.recipe_model import recipe_out
from models.user_model import CurrentUser
from utils.rating import recipe_rating
from utils.recipe_handlers import find_recipe, parse_recipe_id

logger = logging.getLogger(__name__)

# Optimistic write attempts before giving up on a contended recipe
MAX_WRITE_ATTEMPTS = 5


def validate_rating(rating: Any) -> int:
    """
    Validate rating is between 1-5 stars
    """
    if not isinstance(rating, int) or isinstance(rating, bool) or rating < 1 or rating > 5:
        raise ValidationError("Rating must be between 1 and 5")
    return rating


def validate_comment_text(text: Any) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Comment cannot be empty")
    text = text.strip()
    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters")
    return text


def parse_comment_index(comment_index: str) -> int:
    if not isinstance(comment_index, str) or not comment_index.strip().isdecimal():
        raise ValidationError("Invalid comment index")
    return int(comment_index.strip())


async def _rewrite_comments(recipe_id: int,
                            edit: Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]) -> Dict[str, Any]:
    """
    Apply `edit` to the latest comments and store the result with its
    recomputed rating. The write only lands if `comments_version` is still
    the one `edit` saw; otherwise the recipe is re-read and `edit` runs again.
    A write that matched is never repeated.
    """
    for _ in range(MAX_WRITE_ATTEMPTS):
        recipe = await find_recipe(recipe_id)
        comments = edit(list(recipe.get("comments") or []))

        version = recipe.get("comments_version")
        version_filter = {"$exists": False} if version is None else version
        changes = {
            "comments": comments,
            "rating": recipe_rating(comments),
            "comments_version": (version or 0) + 1,
            "updated_at": datetime.now(timezone.utc),
        }

        try:
            result = await recipe_collection.update_one(
                {"id": recipe_id, "comments_version": version_filter},
                {"$set": changes},
            )
        except PyMongoError as e:
            logger.error(f"Failed to update comments on recipe {recipe_id}: {e}")
            raise StorageError("Server error while updating comments")

        if result.matched_count:
            return {**recipe, **changes}
        logger.info(f"Comments on recipe {recipe_id} changed concurrently, retrying")

    raise StorageError("Recipe is being modified, please try again")


async def add_comment_handler(recipe_id: str, payload: CommentIn, user: CurrentUser) -> dict:
    rid = parse_recipe_id(recipe_id)
    text = validate_comment_text(payload.comment)
    rating = validate_rating(payload.rating)

    comment = {
        "text": text,
        "rating": rating,
        "author_user_id": user.user_id,
        "author_username": user.username,
        "created_at": datetime.now(timezone.utc),
    }

    def append(comments):
        comments.append(comment)
        return comments

    updated = await _rewrite_comments(rid, append)
    logger.info(f"Comment added to recipe {rid} by {user.username} (rating={rating}, avg={updated['rating']})")
    return {"message": "Comment added", "recipe": recipe_out(updated)}


async def delete_comment_handler(recipe_id: str, comment_index: str, user: CurrentUser) -> dict:
    """
    Admin-only removal of the comment at an ordinal position
    """
    ensure_can_delete_comment(user)
    rid = parse_recipe_id(recipe_id)
    index = parse_comment_index(comment_index)

    def remove(comments):
        if index >= len(comments):
            raise ValidationError("Comment index out of range")
        del comments[index]
        return comments

    updated = await _rewrite_comments(rid, remove)
    logger.info(f"Comment {index} removed from recipe {rid} by {user.username} (avg={updated['rating']})")
    return {"message": "Comment deleted", "recipe": recipe_out(updated)}
