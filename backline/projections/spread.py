"""
Projected point spread from two pre-game ratings.

Convention: negative = home favoured by that many points.

    spread = -(rating_diff / scale_constant) - home_field - adjustments

where rating_diff = home - away, home_field is zero at neutral sites and
adjustments are the bounded contextual terms (rest, form, availability),
each positive when it favours the home side.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Tuple

from backline.data.types import Game
from backline.projections.adjustments import (
    availability_adjustment,
    form_adjustment,
    rest_adjustment,
    rest_days,
)
from backline.ratings.types import Rating


@dataclass(frozen=True)
class ProjectionParameters:
    """Constants of the spread and total projections, with explicit caps."""

    # Rating points per point of margin
    scale_constant: float = 25.0
    home_field_points: float = 4.0  # 100 Elo home field / 25

    max_rest_adjustment: float = 2.0

    form_window: int = 3
    form_weight: float = 0.25
    max_form_adjustment: float = 2.0

    points_per_impact: float = 3.0
    max_availability_adjustment: float = 4.0

    league_average_total: float = 55.0
    pace_weight: float = 0.25
    max_pace_adjustment: float = 3.0
    max_weather_adjustment: float = 10.0

    round_to_half: bool = False

    def __post_init__(self):
        if self.scale_constant <= 0:
            raise ValueError(f"scale_constant must be positive, got {self.scale_constant}")
        for name in (
            "max_rest_adjustment",
            "max_form_adjustment",
            "max_availability_adjustment",
            "max_pace_adjustment",
            "max_weather_adjustment",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")


def round_half(value: float) -> float:
    """Round to the nearest half point (halves round away from zero)."""
    return math.copysign(math.floor(abs(value) * 2.0 + 0.5) / 2.0, value)


def spread_adjustments(
    home: Rating,
    away: Rating,
    game: Game,
    params: ProjectionParameters,
) -> Dict[str, float]:
    """Home-favouring contextual terms, keyed by name."""
    ctx = game.context
    home_rest = rest_days(ctx.home_rest_days, home.last_played, game.start_time)
    away_rest = rest_days(ctx.away_rest_days, away.last_played, game.start_time)

    return {
        "home_field": 0.0 if ctx.neutral_site else params.home_field_points,
        "rest": rest_adjustment(home_rest, away_rest, params.max_rest_adjustment),
        "form": form_adjustment(
            home, away, params.form_window, params.form_weight, params.max_form_adjustment
        ),
        "availability": availability_adjustment(
            ctx.home_injuries,
            ctx.away_injuries,
            params.points_per_impact,
            params.max_availability_adjustment,
        ),
    }


def project_spread(
    home: Rating,
    away: Rating,
    game: Game,
    params: ProjectionParameters,
) -> Tuple[float, Dict[str, float]]:
    """
    Project the home-perspective spread for *game*.

    Args:
        home: Home team rating entering the game
        away: Away team rating entering the game
        game: The game (only its context and start time are used)
        params: Projection constants

    Returns:
        (spread, adjustments) where adjustments holds every additive term
    """
    adjustments = spread_adjustments(home, away, game, params)
    rating_diff = home.value - away.value
    spread = -(rating_diff / params.scale_constant) - sum(adjustments.values())

    if params.round_to_half:
        spread = round_half(spread)
    # avoid -0.0 in reports
    return spread + 0.0, adjustments
