"""
Parsing and validation of multipart recipe forms.

Create and update share the same field parsers, so a field supplied to
PUT is validated exactly like the same field on POST.
"""
import json
import os
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

from starlette.datastructures import FormData, UploadFile

from core.errors import ValidationError

MAX_IMAGE_BYTES = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png"}
ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}
YOUTUBE_URL_RE = re.compile(r"^(https?://)?(www\.)?(youtube\.com|youtu\.be)/.+$", re.IGNORECASE)

TRUE_VALUES = {"1", "true", "yes", "on"}


class _Unset:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNSET"


# Marks a patch field the client did not send
UNSET = _Unset()


@dataclass
class ImageUpload:
    filename: str
    content_type: str
    data: bytes


@dataclass
class RecipeDraft:
    name: str
    cuisine: str
    cooking_time: int
    ingredients: List[Dict[str, str]]
    method_steps: List[str]
    nutritional_info: str = ""
    youtube_link: str = ""
    image: Optional[ImageUpload] = None


@dataclass
class RecipePatch:
    """
    Partial update: each field is either UNSET (leave unchanged) or the new
    value. Optional text fields may be set to "" to clear them.
    """
    name: Any = UNSET
    cuisine: Any = UNSET
    cooking_time: Any = UNSET
    ingredients: Any = UNSET
    method_steps: Any = UNSET
    nutritional_info: Any = UNSET
    youtube_link: Any = UNSET
    image: Any = UNSET
    remove_image: bool = False

    def document_changes(self) -> Dict[str, Any]:
        """Supplied document fields, excluding image handling"""
        changes = {}
        for f in fields(self):
            if f.name in ("image", "remove_image"):
                continue
            value = getattr(self, f.name)
            if value is not UNSET:
                changes[f.name] = value
        return changes

    def is_empty(self) -> bool:
        return not self.document_changes() and self.image is UNSET and not self.remove_image


# ==================== FIELD PARSERS ====================

def _text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("Invalid form field")
    return value.strip()


def parse_required_text(value: Any, label: str) -> str:
    text = _text(value)
    if not text:
        raise ValidationError(f"{label} is required")
    return text


def parse_cooking_time(value: Any) -> int:
    text = _text(value)
    try:
        minutes = int(text)
    except ValueError:
        raise ValidationError("Cooking time must be a positive number")
    if minutes <= 0:
        raise ValidationError("Cooking time must be a positive number")
    return minutes


def parse_ingredients(value: Any) -> List[Dict[str, str]]:
    text = _text(value)
    if not text:
        raise ValidationError("At least one ingredient is required")
    try:
        raw = json.loads(text)
    except json.JSONDecodeError:
        raise ValidationError("Ingredients must be a JSON array of {name, quantity, unit} objects")
    if not isinstance(raw, list):
        raise ValidationError("Ingredients must be a JSON array of {name, quantity, unit} objects")

    ingredients = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Ingredients must be a JSON array of {name, quantity, unit} objects")
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Each ingredient must have a name")
        quantity = item.get("quantity", "")
        unit = item.get("unit", "")
        if not isinstance(quantity, (str, int, float)) or isinstance(quantity, bool):
            raise ValidationError("Ingredient quantity must be text or a number")
        if unit is None:
            unit = ""
        if not isinstance(unit, str):
            raise ValidationError("Ingredient unit must be text")
        ingredients.append({
            "name": name.strip(),
            "quantity": str(quantity).strip(),
            "unit": unit.strip(),
        })

    if not ingredients:
        raise ValidationError("At least one ingredient is required")
    return ingredients


def parse_method_steps(value: Any) -> List[str]:
    """
    Accepts a JSON array of strings or a comma-separated string.
    Blank steps are dropped; at least one must remain.
    """
    text = _text(value)
    if text.startswith("["):
        try:
            raw = json.loads(text)
        except json.JSONDecodeError:
            raise ValidationError("Method steps must be a JSON array of strings")
        if not isinstance(raw, list) or not all(isinstance(step, str) for step in raw):
            raise ValidationError("Method steps must be a JSON array of strings")
    else:
        raw = text.split(",")

    steps = [step.strip() for step in raw if step.strip()]
    if not steps:
        raise ValidationError("At least one method step is required")
    return steps


def parse_youtube_link(value: Any) -> str:
    link = _text(value)
    if link and not YOUTUBE_URL_RE.match(link):
        raise ValidationError("Please enter a valid YouTube URL")
    return link


async def parse_image(value: Any) -> Optional[ImageUpload]:
    """Read and validate an uploaded image; an empty file part means no image"""
    if value is None or isinstance(value, str):
        return None
    if not isinstance(value, UploadFile) or not value.filename:
        return None

    extension = os.path.splitext(value.filename)[1].lower()
    content_type = (value.content_type or "").lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS or content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Only .jpg and .png files are allowed")

    data = await value.read()
    if not data:
        return None
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationError("Image must be 5MB or smaller")
    return ImageUpload(filename=value.filename, content_type=content_type, data=data)


# ==================== FORM BUILDERS ====================

async def parse_recipe_draft(form: FormData) -> RecipeDraft:
    """Validate a create form; raises ValidationError before anything is stored"""
    return RecipeDraft(
        name=parse_required_text(form.get("name"), "Name"),
        cuisine=parse_required_text(form.get("cuisine"), "Cuisine"),
        cooking_time=parse_cooking_time(form.get("cookingTime")),
        ingredients=parse_ingredients(form.get("ingredients")),
        method_steps=parse_method_steps(form.get("methodSteps")),
        nutritional_info=_text(form.get("nutritionalInfo")),
        youtube_link=parse_youtube_link(form.get("youtubeLink")),
        image=await parse_image(form.get("image")),
    )


async def parse_recipe_patch(form: FormData) -> RecipePatch:
    """Validate an update form; only keys present in the form are set"""
    patch = RecipePatch()
    if "name" in form:
        patch.name = parse_required_text(form.get("name"), "Name")
    if "cuisine" in form:
        patch.cuisine = parse_required_text(form.get("cuisine"), "Cuisine")
    if "cookingTime" in form:
        patch.cooking_time = parse_cooking_time(form.get("cookingTime"))
    if "ingredients" in form:
        patch.ingredients = parse_ingredients(form.get("ingredients"))
    if "methodSteps" in form:
        patch.method_steps = parse_method_steps(form.get("methodSteps"))
    if "nutritionalInfo" in form:
        patch.nutritional_info = _text(form.get("nutritionalInfo"))
    if "youtubeLink" in form:
        patch.youtube_link = parse_youtube_link(form.get("youtubeLink"))
    if "image" in form:
        image = await parse_image(form.get("image"))
        if image is not None:
            patch.image = image
    if "removeImage" in form:
        patch.remove_image = _text(form.get("removeImage")).lower() in TRUE_VALUES

    if patch.image is not UNSET and patch.remove_image:
        raise ValidationError("Cannot upload and remove an image in the same request")
    return patch
