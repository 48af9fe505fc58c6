"""
Tests for rating aggregation helpers.
"""
import random
from statistics import mean

import pytest

from utils.rating import average_rating, extract_comment_ratings, recipe_rating


class TestAverageRating:

    def test_no_ratings_is_zero(self):
        assert average_rating([]) == 0.0

    def test_single_rating(self):
        assert average_rating([5]) == 5.0

    def test_five_and_three_average_to_four(self):
        assert average_rating([5, 3]) == 4.0

    def test_rounds_to_one_decimal(self):
        assert average_rating([5, 4, 4]) == 4.3
        assert average_rating([1, 2, 2]) == 1.7

    def test_halves_round_up(self):
        # 17 / 4 == 4.25
        assert average_rating([4, 5, 4, 4]) == 4.3
        # 13 / 4 == 3.25
        assert average_rating([3, 3, 3, 4]) == 3.3

    def test_matches_mean_for_random_samples(self):
        rng = random.Random(1234)
        for _ in range(200):
            ratings = [rng.randint(1, 5) for _ in range(rng.randint(1, 30))]
            assert average_rating(ratings) == pytest.approx(mean(ratings), abs=0.051)


class TestCommentRatings:

    def test_skips_missing_and_out_of_range(self):
        comments = [{"rating": 5}, {"rating": 0}, {"rating": 6}, {}, {"rating": "4"}, {"rating": True}]
        assert extract_comment_ratings(comments) == [5]

    def test_recipe_rating_from_comments(self):
        comments = [{"text": "Great!", "rating": 5}, {"text": "OK", "rating": 3}]
        assert recipe_rating(comments) == 4.0

    def test_recipe_rating_without_comments(self):
        assert recipe_rating([]) == 0.0
        assert recipe_rating(None) == 0.0
