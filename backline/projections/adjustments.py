"""
Bounded contextual adjustments layered on the base projection.

Each function returns a home-perspective number of points (positive
favours the home side for spread terms, positive raises the total for
pace) and is capped at an explicit bound passed by the caller, so no single
term can outweigh the rating signal.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

import numpy as np

from backline.data.injuries import TeamInjuryReport
from backline.ratings.types import Rating

# Rest tiers
BYE_REST_DAYS = 12
BYE_REST_POINTS = 1.5
SHORT_REST_DAYS = 5
SHORT_REST_POINTS = -1.0


def cap(value: float, bound: float) -> float:
    """Clamp *value* to [-bound, bound]."""
    return max(-bound, min(bound, value))


# --------------------------------------------------------------------------- #
# Rest
# --------------------------------------------------------------------------- #

def rest_days(
    known_days: Optional[int],
    last_played: Optional[datetime],
    start_time: datetime,
) -> Optional[int]:
    """
    Days of rest before a game.

    Uses the context value when given, else the gap since the team's
    previous completed game as recorded on its pre-game rating.
    """
    if known_days is not None:
        return known_days
    if last_played is None:
        return None
    return (start_time - last_played).days


def rest_points(days: Optional[int]) -> float:
    if days is None:
        return 0.0
    if days >= BYE_REST_DAYS:
        return BYE_REST_POINTS
    if days <= SHORT_REST_DAYS:
        return SHORT_REST_POINTS
    return 0.0


def rest_adjustment(home_days: Optional[int], away_days: Optional[int], max_adjustment: float) -> float:
    """Home rest edge in points, capped at ±max_adjustment."""
    return cap(rest_points(home_days) - rest_points(away_days), max_adjustment)


# --------------------------------------------------------------------------- #
# Recent form
# --------------------------------------------------------------------------- #

def recent_form(rating: Rating, window: int) -> Optional[float]:
    """
    Mean of the last *window* margins minus the season mean margin.

    None until the team has played *window* games.
    """
    if window < 1 or len(rating.recent_margins) < window or rating.avg_margin is None:
        return None
    recent = float(np.mean(rating.recent_margins[-window:]))
    return recent - rating.avg_margin


def form_adjustment(
    home: Rating,
    away: Rating,
    window: int,
    weight: float,
    max_adjustment: float,
) -> float:
    home_form = recent_form(home, window)
    away_form = recent_form(away, window)
    if home_form is None or away_form is None:
        return 0.0
    return cap(weight * (home_form - away_form), max_adjustment)


# --------------------------------------------------------------------------- #
# Key-player availability
# --------------------------------------------------------------------------- #

def availability_adjustment(
    home_report: Optional[TeamInjuryReport],
    away_report: Optional[TeamInjuryReport],
    points_per_impact: float,
    max_adjustment: float,
) -> float:
    """
    Points credited to the home side for the opponent's absences.

    A missing report counts as a healthy roster.
    """
    home_impact = home_report.availability_impact if home_report else 0.0
    away_impact = away_report.availability_impact if away_report else 0.0
    return cap((away_impact - home_impact) * points_per_impact, max_adjustment)


# --------------------------------------------------------------------------- #
# Pace / scoring environment (totals)
# --------------------------------------------------------------------------- #

def scoring_environment(rating: Rating) -> Optional[float]:
    """Average combined points in the team's games so far."""
    if rating.games_played == 0:
        return None
    return (rating.points_for + rating.points_against) / rating.games_played


def pace_adjustment(
    home: Rating,
    away: Rating,
    league_average_total: float,
    weight: float,
    max_adjustment: float,
) -> float:
    home_env = scoring_environment(home)
    away_env = scoring_environment(away)
    if home_env is None or away_env is None:
        return 0.0
    return cap(weight * ((home_env + away_env) / 2.0 - league_average_total), max_adjustment)
