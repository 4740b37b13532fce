"""
Elo-style rating update rule.

Formula:
    Expected home score: E = 1 / (1 + 10^((R_away - R_home - HFA) / 400))
    Margin multiplier:   M = ln(|margin| + 1) * c
    Delta:               D = K_tapered * M * (S - E)
    R_home += D, R_away -= D

The update is zero-sum: home and away move by equal and opposite amounts.
When a delta cap is configured it is applied to D after the multiply, so
the update stays zero-sum.

A tied game has margin 0, so M = ln(1) * c = 0 and the game leaves both
ratings unchanged. That is intended: a tie carries no ordering signal.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from backline.data.types import Game
from backline.ratings.types import Rating

# Standard Elo logistic curve: a 400-point gap is 10:1 odds
ELO_LOGISTIC_BASE = 10.0
ELO_LOGISTIC_DIVISOR = 400.0

DEFAULT_RATING = 1500.0


@dataclass(frozen=True)
class EloParameters:
    """Constants of the rating update rule."""

    k_factor: float = 20.0
    home_field_elo: float = 100.0
    margin_coefficient: float = 0.8
    use_margin: bool = True

    # K taper: K * max(k_floor, 1 - games_played / k_taper_games).
    # None disables tapering.
    k_taper_games: Optional[int] = None
    k_floor: float = 0.5

    # Optional cap on |delta|, applied after K * multiplier * (S - E)
    max_delta: Optional[float] = None

    # Number of recent game margins kept on each rating
    form_window: int = 3

    def __post_init__(self):
        if self.k_factor < 0:
            raise ValueError(f"k_factor must be >= 0, got {self.k_factor}")
        if self.margin_coefficient < 0:
            raise ValueError(f"margin_coefficient must be >= 0, got {self.margin_coefficient}")
        if not 0.0 <= self.k_floor <= 1.0:
            raise ValueError(f"k_floor must be in [0, 1], got {self.k_floor}")
        if self.k_taper_games is not None and self.k_taper_games <= 0:
            raise ValueError(f"k_taper_games must be positive, got {self.k_taper_games}")
        if self.max_delta is not None and self.max_delta <= 0:
            raise ValueError(f"max_delta must be positive, got {self.max_delta}")
        if self.form_window < 1:
            raise ValueError(f"form_window must be >= 1, got {self.form_window}")


def expected_home_win_probability(
    home_value: float,
    away_value: float,
    home_field_elo: float = 0.0,
) -> float:
    """
    Pre-game probability that the home team wins.

    Args:
        home_value: Home team rating
        away_value: Away team rating
        home_field_elo: Elo points credited to the home side (0 at neutral sites)
    """
    exponent = (away_value - home_value - home_field_elo) / ELO_LOGISTIC_DIVISOR
    return 1.0 / (1.0 + ELO_LOGISTIC_BASE ** exponent)


def actual_outcome(home_score: int, away_score: int) -> float:
    """1.0 for a home win, 0.0 for a home loss, 0.5 for a tie."""
    if home_score > away_score:
        return 1.0
    if home_score < away_score:
        return 0.0
    return 0.5


def margin_multiplier(margin: float, coefficient: float = 0.8) -> float:
    """
    Concave, increasing multiplier of the absolute score margin.

    Non-negative and finite for every finite margin; exactly 0 at margin 0.
    """
    return math.log(abs(margin) + 1.0) * coefficient


def tapered_k(
    k_factor: float,
    games_played: int,
    taper_games: Optional[int] = None,
    k_floor: float = 0.5,
) -> float:
    """
    K for a team that has already played *games_played* games this season.

    Early-season games move ratings more; K falls linearly to
    ``k_factor * k_floor`` after *taper_games* games.
    """
    if taper_games is None:
        return k_factor
    return k_factor * max(k_floor, 1.0 - games_played / taper_games)


def rating_delta(
    home: Rating,
    away: Rating,
    home_score: int,
    away_score: int,
    params: EloParameters,
    neutral_site: bool = False,
) -> float:
    """
    Signed rating change for the home team (the away team gets the negation).

    Both teams share one K, the mean of their tapered K values, so the
    update is zero-sum even when their games-played counts differ.
    """
    home_field = 0.0 if neutral_site else params.home_field_elo
    expected = expected_home_win_probability(home.value, away.value, home_field)
    actual = actual_outcome(home_score, away_score)

    k_home = tapered_k(params.k_factor, home.games_played, params.k_taper_games, params.k_floor)
    k_away = tapered_k(params.k_factor, away.games_played, params.k_taper_games, params.k_floor)
    k = (k_home + k_away) / 2.0

    if params.use_margin:
        multiplier = margin_multiplier(home_score - away_score, params.margin_coefficient)
    else:
        multiplier = 1.0

    delta = k * multiplier * (actual - expected)

    if params.max_delta is not None:
        delta = max(-params.max_delta, min(params.max_delta, delta))

    return delta


def _after_game(
    rating: Rating,
    game: Game,
    new_value: float,
    scored: int,
    allowed: int,
    form_window: int,
) -> Rating:
    margins = (rating.recent_margins + (float(scored - allowed),))[-form_window:]
    return replace(
        rating,
        value=new_value,
        games_played=rating.games_played + 1,
        week=game.week,
        updated_at=game.start_time,
        points_for=rating.points_for + scored,
        points_against=rating.points_against + allowed,
        recent_margins=margins,
        last_played=game.start_time,
    )


def apply_game(
    home: Rating,
    away: Rating,
    game: Game,
    params: EloParameters,
) -> Tuple[Rating, Rating]:
    """
    Apply one completed game to both teams' pre-game ratings.

    Returns:
        (home_after, away_after), each stamped with the game's week and
        start time

    Raises:
        ValueError: If the game has no final score or the ratings do not
            belong to the game's teams and season
    """
    if not game.is_final:
        raise ValueError(f"Game {game.game_id} has no final score")
    if (home.team_id, away.team_id) != (game.home_team, game.away_team):
        raise ValueError(
            f"Ratings for {home.team_id}/{away.team_id} do not match game "
            f"{game.game_id} ({game.home_team} vs {game.away_team})"
        )
    if home.season != game.season or away.season != game.season:
        raise ValueError(f"Ratings are not for season {game.season} (game {game.game_id})")

    delta = rating_delta(
        home,
        away,
        game.home_score,
        game.away_score,
        params,
        neutral_site=game.context.neutral_site,
    )

    home_after = _after_game(
        home, game, home.value + delta, game.home_score, game.away_score, params.form_window
    )
    away_after = _after_game(
        away, game, away.value - delta, game.away_score, game.home_score, params.form_window
    )
    return home_after, away_after
