from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from datetime import datetime


class CamelModel(BaseModel):
    """Snake_case in Python and MongoDB, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ingredient(CamelModel):
    name: str
    quantity: str = ""
    unit: str = ""


class CommentOut(CamelModel):
    text: str
    rating: int
    author_user_id: Optional[str] = None
    author_username: Optional[str] = None
    created_at: Optional[datetime] = None


class RecipeOut(CamelModel):
    id: int
    name: str
    cuisine: str
    cooking_time: int
    ingredients: List[Ingredient] = Field(default_factory=list)
    nutritional_info: str = ""
    method_steps: List[str] = Field(default_factory=list)
    youtube_link: str = ""
    image_url: str = ""
    comments: List[CommentOut] = Field(default_factory=list)
    rating: float = 0.0
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Soup",
                "cuisine": "French",
                "cookingTime": 30,
                "ingredients": [{"name": "Salt", "quantity": "1", "unit": "tsp"}],
                "nutritionalInfo": "",
                "methodSteps": ["Boil", "Serve"],
                "youtubeLink": "",
                "imageUrl": "",
                "comments": [],
                "rating": 0,
                "createdBy": "alice_dev",
            }
        }
    )


def recipe_out(doc: Dict[str, Any]) -> RecipeOut:
    """Convert a stored recipe document to its API shape"""
    return RecipeOut(
        id=doc["id"],
        name=doc.get("name", ""),
        cuisine=doc.get("cuisine", ""),
        cooking_time=int(doc.get("cooking_time") or 0),
        ingredients=doc.get("ingredients") or [],
        nutritional_info=doc.get("nutritional_info") or "",
        method_steps=doc.get("method_steps") or [],
        youtube_link=doc.get("youtube_link") or "",
        image_url=doc.get("image_url") or "",
        comments=doc.get("comments") or [],
        rating=float(doc.get("rating") or 0.0),
        created_by=doc.get("created_by", ""),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )


class RecipeMessageOut(BaseModel):
    message: str
    recipe: RecipeOut


class ScaledIngredient(CamelModel):
    name: str
    quantity: str
    unit: str = ""
    scaled_quantity: str


class ScaledRecipeOut(CamelModel):
    id: int
    servings: int
    ingredients: List[ScaledIngredient]
