"""
Ownership rules for recipe and comment mutations.

Admin status comes from the `role` claim fixed when the token was issued;
nothing here compares against a hardcoded username.
"""
from typing import Any, Dict

from core.config import get_settings
from core.errors import AuthorizationError
from models.user_model import CurrentUser


def resolve_role(user_doc: Dict[str, Any]) -> str:
    """Role embedded in a newly issued token"""
    if user_doc.get("role") == "admin":
        return "admin"
    if user_doc.get("username") in get_settings().admin_usernames:
        return "admin"
    return "user"


def is_owner(user: CurrentUser, recipe: Dict[str, Any]) -> bool:
    return recipe.get("created_by") == user.username


def ensure_can_edit_recipe(user: CurrentUser, recipe: Dict[str, Any]) -> None:
    if not is_owner(user, recipe):
        raise AuthorizationError("You can only edit your own recipes")


def ensure_can_delete_recipe(user: CurrentUser, recipe: Dict[str, Any]) -> None:
    if not (user.is_admin or is_owner(user, recipe)):
        raise AuthorizationError("You can only delete your own recipes")


def ensure_can_delete_comment(user: CurrentUser) -> None:
    if not user.is_admin:
        raise AuthorizationError("Only an admin can delete comments")
