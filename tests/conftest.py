from datetime import datetime, timedelta, timezone

import pytest

from backline.data.types import Game, GameContext, MarketLine
from backline.ratings.types import Rating

SEASON_2023_KICKOFF = datetime(2023, 9, 10, 17, 0, tzinfo=timezone.utc)
SEASON_2024_KICKOFF = datetime(2024, 9, 8, 17, 0, tzinfo=timezone.utc)


def _make_game(
    game_id,
    home,
    away,
    home_score=None,
    away_score=None,
    season=2024,
    week=1,
    start=None,
    **context,
):
    kickoff = SEASON_2023_KICKOFF if season == 2023 else SEASON_2024_KICKOFF
    return Game(
        game_id=game_id,
        season=season,
        week=week,
        start_time=start or kickoff + timedelta(days=7 * (week - 1)),
        home_team=home,
        away_team=away,
        home_score=home_score,
        away_score=away_score,
        context=GameContext(**context),
    )


def _make_rating(team_id="KC", value=1500.0, season=2024, **kwargs):
    return Rating(team_id=team_id, season=season, value=value, **kwargs)


@pytest.fixture
def make_game():
    """Factory for Game records with sensible defaults."""
    return _make_game


@pytest.fixture
def make_rating():
    return _make_rating


@pytest.fixture
def two_season_games():
    """
    Four teams, three weeks of 2023 and two weeks of 2024.

    Two games per week at 17:00 and 20:25 UTC; the last 2024 game is
    unplayed.
    """
    late = timedelta(hours=3, minutes=25)
    k23 = SEASON_2023_KICKOFF
    k24 = SEASON_2024_KICKOFF
    week = timedelta(days=7)
    return [
        _make_game("2023-01-a", "KC", "DET", 27, 20, season=2023, week=1, start=k23),
        _make_game("2023-01-b", "BUF", "MIA", 31, 10, season=2023, week=1, start=k23 + late),
        _make_game("2023-02-a", "DET", "MIA", 24, 21, season=2023, week=2, start=k23 + week),
        _make_game("2023-02-b", "KC", "BUF", 17, 24, season=2023, week=2, start=k23 + week + late),
        _make_game("2023-03-a", "MIA", "KC", 20, 27, season=2023, week=3, start=k23 + 2 * week),
        _make_game("2023-03-b", "BUF", "DET", 28, 14, season=2023, week=3, start=k23 + 2 * week + late),
        _make_game("2024-01-a", "KC", "BUF", 30, 17, season=2024, week=1, start=k24),
        _make_game("2024-01-b", "MIA", "DET", 13, 20, season=2024, week=1, start=k24 + late),
        _make_game("2024-02-a", "DET", "KC", 23, 23, season=2024, week=2, start=k24 + week),
        _make_game("2024-02-b", "BUF", "MIA", None, None, season=2024, week=2, start=k24 + week + late),
    ]


@pytest.fixture
def two_season_lines():
    """Closing and opening lines for most games; 2023-01-b is untracked."""
    return [
        MarketLine("2023-01-a", opening_spread=-3.0, closing_spread=-3.5, opening_total=47.0, closing_total=48.5),
        MarketLine("2023-02-a", opening_spread=-1.0, closing_spread=-1.5, opening_total=44.0, closing_total=43.5),
        MarketLine("2023-02-b", opening_spread=-2.5, closing_spread=-1.0, opening_total=49.0, closing_total=50.0),
        MarketLine("2023-03-a", opening_spread=6.5, closing_spread=7.0, opening_total=45.5, closing_total=45.5),
        MarketLine("2023-03-b", opening_spread=-4.0, closing_spread=-6.0, opening_total=46.0, closing_total=44.0),
        MarketLine("2024-01-a", opening_spread=-1.0, closing_spread=-2.5, opening_total=51.0, closing_total=52.5),
        MarketLine("2024-01-b", opening_spread=3.0, closing_spread=2.5, opening_total=41.5, closing_total=40.0),
        MarketLine("2024-02-a", opening_spread=1.5, closing_spread=1.0, opening_total=46.5, closing_total=46.0),
        MarketLine("2024-02-b", opening_spread=-3.0, closing_spread=-3.5),
    ]
