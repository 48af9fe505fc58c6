"""
Recipe Management Routes - Simplified Main Router
All handlers live in utils.recipe_handlers
"""
from fastapi import APIRouter, Depends, Query, Request
from models.recipe_model import RecipeOut, ScaledRecipeOut
from models.user_model import CurrentUser, MessageResponse
from core.auth.dependencies import get_current_user
from utils.recipe_handlers import (
    create_recipe_handler,
    delete_recipe_handler,
    get_all_recipes_handler,
    get_recipe_handler,
    get_scaled_recipe_handler,
    update_recipe_handler,
)
from typing import List, Optional

router = APIRouter()


# ==================== RECIPE ROUTES ====================
@router.get("", response_model=List[RecipeOut])
async def get_all_recipes(search: Optional[str] = None, user: CurrentUser = Depends(get_current_user)):
    return await get_all_recipes_handler(search)


@router.post("", response_model=RecipeOut, status_code=201)
async def create_recipe(request: Request, user: CurrentUser = Depends(get_current_user)):
    # multipart: text fields plus an optional `image` file
    form = await request.form()
    return await create_recipe_handler(form, user)


@router.get("/{recipe_id}", response_model=RecipeOut)
async def get_recipe(recipe_id: str, user: CurrentUser = Depends(get_current_user)):
    return await get_recipe_handler(recipe_id)


@router.get("/{recipe_id}/scaled", response_model=ScaledRecipeOut)
async def get_scaled_recipe(recipe_id: str, servings: int = Query(1, ge=1, le=100),
                            user: CurrentUser = Depends(get_current_user)):
    return await get_scaled_recipe_handler(recipe_id, servings)


@router.put("/{recipe_id}", response_model=RecipeOut)
async def update_recipe(recipe_id: str, request: Request, user: CurrentUser = Depends(get_current_user)):
    form = await request.form()
    return await update_recipe_handler(recipe_id, form, user)


@router.delete("/{recipe_id}", response_model=MessageResponse)
async def delete_recipe(recipe_id: str, user: CurrentUser = Depends(get_current_user)):
    return await delete_recipe_handler(recipe_id, user)
