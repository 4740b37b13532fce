"""
Team ratings: the update rule, the season transition and the versioned store.
"""

from backline.ratings.types import Rating, RatingSnapshot
from backline.ratings.elo import (
    DEFAULT_RATING,
    EloParameters,
    apply_game,
    expected_home_win_probability,
    margin_multiplier,
    rating_delta,
    tapered_k,
)
from backline.ratings.season import SeasonTransition, carry_over, regress_to_mean, seed_rating
from backline.ratings.store import RatingStore

__all__ = [
    "Rating",
    "RatingSnapshot",
    "DEFAULT_RATING",
    "EloParameters",
    "apply_game",
    "expected_home_win_probability",
    "margin_multiplier",
    "rating_delta",
    "tapered_k",
    "SeasonTransition",
    "carry_over",
    "regress_to_mean",
    "seed_rating",
    "RatingStore",
]
