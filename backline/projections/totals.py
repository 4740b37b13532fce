"""
Projected total points.

The base total blends each offence with the opposing defence:

    base = (home_for + away_against) / 2 + (away_for + home_against) / 2

using per-game averages from the current season; until both teams have a
completed game the league-average total is used. Pace and weather terms are
then added, each capped. Indoor games get no weather term.
"""
from __future__ import annotations

from typing import Dict, Tuple

from backline.data.types import Game
from backline.projections.adjustments import pace_adjustment
from backline.projections.spread import ProjectionParameters, round_half
from backline.projections.weather import weather_adjustment
from backline.ratings.types import Rating


def base_total(home: Rating, away: Rating, league_average_total: float) -> float:
    if home.games_played == 0 or away.games_played == 0:
        return league_average_total
    home_side = (home.avg_points_for + away.avg_points_against) / 2.0
    away_side = (away.avg_points_for + home.avg_points_against) / 2.0
    return home_side + away_side


def project_total(
    home: Rating,
    away: Rating,
    game: Game,
    params: ProjectionParameters,
) -> Tuple[float, Dict[str, float]]:
    """
    Project the combined score of *game*.

    Returns:
        (total, adjustments) with "pace" and "weather" terms
    """
    ctx = game.context
    adjustments = {
        "pace": pace_adjustment(
            home, away, params.league_average_total, params.pace_weight, params.max_pace_adjustment
        ),
        "weather": weather_adjustment(ctx.weather, ctx.indoor, params.max_weather_adjustment),
    }
    total = base_total(home, away, params.league_average_total) + sum(adjustments.values())
    if params.round_to_half:
        total = round_half(total)
    return total, adjustments
