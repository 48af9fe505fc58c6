from fastapi import APIRouter, Depends
from core.auth.dependencies import get_current_user
from models.comment_model import CommentIn
from models.recipe_model import RecipeMessageOut
from models.user_model import CurrentUser
from utils.comment_handlers import add_comment_handler, delete_comment_handler

router = APIRouter(tags=["Comments"])


@router.post("/{recipe_id}/comment", response_model=RecipeMessageOut)
async def add_comment(recipe_id: str, payload: CommentIn, user: CurrentUser = Depends(get_current_user)):
    return await add_comment_handler(recipe_id, payload, user)


@router.delete("/{recipe_id}/comments/{comment_index}", response_model=RecipeMessageOut)
async def delete_comment(recipe_id: str, comment_index: str, user: CurrentUser = Depends(get_current_user)):
    """Admin only; the index is the comment's position in the recipe"""
    return await delete_comment_handler(recipe_id, comment_index, user)
