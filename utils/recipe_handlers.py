"""
Recipe Route Handlers
All recipe-related route handlers consolidated here
"""
import logging
import re
from datetime import datetime, timezone
from fractions import Fraction
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError
from starlette.datastructures import FormData

from core.auth.permissions import ensure_can_delete_recipe, ensure_can_edit_recipe
from core.errors import NotFoundError, StorageError, ValidationError
from database.mongo import recipe_collection
from models.recipe_model import RecipeOut, ScaledRecipeOut, recipe_out
from models.user_model import CurrentUser
from utils.cloudinary_helper import delete_image, upload_recipe_image
from utils.counter import RECIPE_COUNTER, next_sequence_value
from utils.recipe_forms import UNSET, parse_recipe_draft, parse_recipe_patch

logger = logging.getLogger(__name__)

# Never expose the storage-native identifier
RECIPE_PROJECTION = {"_id": 0}


# ==================== HELPER FUNCTIONS ====================

def parse_recipe_id(recipe_id: str) -> int:
    """
    Validate and convert the path parameter to the sequential recipe ID
    """
    if not isinstance(recipe_id, str) or not recipe_id.strip().isdecimal():
        raise ValidationError("Invalid recipe ID")
    return int(recipe_id.strip())


async def find_recipe(recipe_id: int) -> Dict[str, Any]:
    try:
        recipe = await recipe_collection.find_one({"id": recipe_id}, RECIPE_PROJECTION)
    except PyMongoError as e:
        logger.error(f"Failed to fetch recipe {recipe_id}: {e}")
        raise StorageError("Failed to fetch recipe")
    if not recipe:
        raise NotFoundError("Recipe not found")
    return recipe


def _format_quantity(value: Fraction) -> str:
    if value.denominator == 1:
        return str(value.numerator)
    return f"{float(value):.2f}".rstrip("0").rstrip(".")


def scale_quantity(quantity: str, servings: int) -> str:
    """
    Multiply a numeric quantity ("2", "0.5", "1/2") by the servings count.
    Non-numeric quantities ("a pinch") are returned unchanged.
    """
    try:
        amount = Fraction(quantity.strip())
    except (ValueError, ZeroDivisionError):
        return quantity
    return _format_quantity(amount * servings)


# ==================== RECIPE HANDLERS ====================

async def get_all_recipes_handler(search: Optional[str] = None) -> List[RecipeOut]:
    """
    List recipes, newest first, optionally filtered by name or cuisine
    """
    query: Dict[str, Any] = {}
    if search and search.strip():
        pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
        query = {"$or": [{"name": pattern}, {"cuisine": pattern}]}

    try:
        recipes = await recipe_collection.find(query, RECIPE_PROJECTION).sort("id", DESCENDING).to_list(length=None)
    except PyMongoError as e:
        logger.error(f"Failed to fetch recipes: {e}")
        raise StorageError("Server error")

    return [recipe_out(recipe) for recipe in recipes]


async def get_recipe_handler(recipe_id: str) -> RecipeOut:
    return recipe_out(await find_recipe(parse_recipe_id(recipe_id)))


async def get_scaled_recipe_handler(recipe_id: str, servings: int) -> ScaledRecipeOut:
    recipe = await find_recipe(parse_recipe_id(recipe_id))
    ingredients = [
        {
            "name": ing.get("name", ""),
            "quantity": ing.get("quantity", ""),
            "unit": ing.get("unit", ""),
            "scaled_quantity": scale_quantity(ing.get("quantity", ""), servings),
        }
        for ing in recipe.get("ingredients") or []
    ]
    return ScaledRecipeOut(id=recipe["id"], servings=servings, ingredients=ingredients)


async def create_recipe_handler(form: FormData, user: CurrentUser) -> RecipeOut:
    """
    Validate the form, upload the image, allocate the next sequential ID
    and store the recipe with no comments and a zero rating
    """
    draft = await parse_recipe_draft(form)

    uploaded = await upload_recipe_image(draft.image) if draft.image else None

    now = datetime.now(timezone.utc)
    recipe_doc = {
        "name": draft.name,
        "cuisine": draft.cuisine,
        "cooking_time": draft.cooking_time,
        "ingredients": draft.ingredients,
        "nutritional_info": draft.nutritional_info,
        "method_steps": draft.method_steps,
        "youtube_link": draft.youtube_link,
        "image_url": uploaded["secure_url"] if uploaded else "",
        "image_public_id": uploaded["public_id"] if uploaded else None,
        "comments": [],
        "rating": 0.0,
        "comments_version": 0,
        "created_by": user.username,
        "created_by_id": user.user_id,
        "created_at": now,
        "updated_at": now,
    }

    try:
        recipe_doc["id"] = await next_sequence_value(RECIPE_COUNTER)
        await recipe_collection.insert_one(recipe_doc)
    except (StorageError, PyMongoError) as e:
        logger.error(f"Failed to create recipe for {user.username}: {e}")
        if uploaded:
            await delete_image(public_id=uploaded["public_id"])
        raise StorageError("Server error during recipe creation")

    logger.info(f"Recipe {recipe_doc['id']} created by {user.username}")
    return recipe_out(recipe_doc)


async def update_recipe_handler(recipe_id: str, form: FormData, user: CurrentUser) -> RecipeOut:
    """
    Partial update: only the fields present in the form change.
    Only the creator may edit.
    """
    rid = parse_recipe_id(recipe_id)
    existing = await find_recipe(rid)
    ensure_can_edit_recipe(user, existing)

    patch = await parse_recipe_patch(form)
    if patch.is_empty():
        return recipe_out(existing)

    changes = patch.document_changes()
    uploaded = None
    if patch.image is not UNSET:
        uploaded = await upload_recipe_image(patch.image)
        changes["image_url"] = uploaded["secure_url"]
        changes["image_public_id"] = uploaded["public_id"]
    elif patch.remove_image:
        changes["image_url"] = ""
        changes["image_public_id"] = None
    changes["updated_at"] = datetime.now(timezone.utc)

    try:
        # Ownership is part of the filter, not just the pre-check above
        updated = await recipe_collection.find_one_and_update(
            {"id": rid, "created_by": user.username},
            {"$set": changes},
            projection=RECIPE_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError as e:
        logger.error(f"Failed to update recipe {rid}: {e}")
        if uploaded:
            await delete_image(public_id=uploaded["public_id"])
        raise StorageError("Server error during recipe update")

    if not updated:
        if uploaded:
            await delete_image(public_id=uploaded["public_id"])
        raise NotFoundError("Recipe not found")

    image_replaced = uploaded is not None or patch.remove_image
    if image_replaced and existing.get("image_url"):
        await delete_image(public_id=existing.get("image_public_id"), image_url=existing.get("image_url"))

    logger.info(f"Recipe {rid} updated by {user.username}: {sorted(changes)}")
    return recipe_out(updated)


async def delete_recipe_handler(recipe_id: str, user: CurrentUser) -> dict:
    """
    Delete a recipe (creator or admin) and its stored image
    """
    rid = parse_recipe_id(recipe_id)
    existing = await find_recipe(rid)
    ensure_can_delete_recipe(user, existing)

    query = {"id": rid} if user.is_admin else {"id": rid, "created_by": user.username}
    try:
        result = await recipe_collection.delete_one(query)
    except PyMongoError as e:
        logger.error(f"Failed to delete recipe {rid}: {e}")
        raise StorageError("Server error during recipe deletion")

    if result.deleted_count == 0:
        raise NotFoundError("Recipe not found")

    if existing.get("image_url"):
        await delete_image(public_id=existing.get("image_public_id"), image_url=existing.get("image_url"))

    logger.info(f"Recipe {rid} deleted by {user.username}")
    return {"message": "Recipe deleted successfully"}
