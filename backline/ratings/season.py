"""
Season transition rule: regression toward the league mean.

    new = league_average + (final - league_average) * carryover

Pure and order-independent across teams.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from backline.ratings.elo import DEFAULT_RATING
from backline.ratings.types import Rating


@dataclass(frozen=True)
class SeasonTransition:
    """Constants of the season transition rule."""

    league_average: float = DEFAULT_RATING
    carryover: float = 0.6

    def __post_init__(self):
        if not 0.0 <= self.carryover <= 1.0:
            raise ValueError(f"carryover must be in [0, 1], got {self.carryover}")


def regress_to_mean(final_value: float, league_average: float, carryover: float) -> float:
    """Shrink *final_value* toward *league_average*, keeping *carryover* of the gap."""
    return league_average + (final_value - league_average) * carryover


def seed_rating(
    team_id: str,
    season: int,
    prior: Optional[Rating],
    transition: SeasonTransition,
) -> Rating:
    """
    Opening rating for *team_id* in *season*, recorded as of week 0.

    Teams with no prior rating start at the league average.
    """
    if prior is None:
        value = transition.league_average
    else:
        value = regress_to_mean(prior.value, transition.league_average, transition.carryover)
    return Rating(team_id=team_id, season=season, value=value)


def carry_over(
    final_ratings: Mapping[str, Rating],
    new_season: int,
    transition: SeasonTransition,
) -> Dict[str, Rating]:
    """Seed ratings for *new_season* from each team's last known rating."""
    return {
        team_id: seed_rating(team_id, new_season, rating, transition)
        for team_id, rating in final_ratings.items()
    }
