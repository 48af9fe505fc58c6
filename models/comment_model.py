#comment_model.py
from pydantic import BaseModel
from typing import Optional

MAX_COMMENT_LENGTH = 255


class CommentIn(BaseModel):
    comment: str = ""
    rating: Optional[int] = None
