from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List


def extract_comment_ratings(comments: Iterable[dict]) -> List[int]:
    """Ratings of every comment, skipping entries without a usable rating"""
    ratings = []
    for comment in comments or []:
        rating = comment.get("rating")
        if isinstance(rating, int) and not isinstance(rating, bool) and 1 <= rating <= 5:
            ratings.append(rating)
    return ratings


def average_rating(ratings: Iterable[int]) -> float:
    """
    Mean rating rounded half-up to one decimal, or 0 when there are no ratings.
    """
    ratings = list(ratings)
    if not ratings:
        return 0.0
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def recipe_rating(comments: Iterable[dict]) -> float:
    return average_rating(extract_comment_ratings(comments))
