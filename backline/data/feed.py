"""
Collaborator interfaces for the game feed and market lines, plus in-memory
and pandas-backed implementations.

GameFeed contract: ascending (start_time, game_id), no duplicate ids.
MarketLineProvider contract: ``line_for`` returns None for untracked games.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Sequence

import pandas as pd

from backline.data.types import Game, GameContext, GameWeather, MarketLine, Team
from backline.data.validators import validate_game_frame, validate_line_frame


class GameFeed(Protocol):
    """Source of pre-sorted games."""

    def games(self, seasons: Optional[Sequence[int]] = None) -> Iterable[Game]:
        """Games for *seasons* (all when None), ascending by (start_time, game_id)."""
        ...


class MarketLineProvider(Protocol):
    """Source of reference-book market lines."""

    def line_for(self, game_id: str) -> Optional[MarketLine]:
        """Line for a game, or None if the game is not tracked."""
        ...


def _clean(value: Any) -> Any:
    """Map pandas/numpy missing values to None and numpy scalars to Python."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT:
        return None
    if hasattr(value, "item"):
        value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return None
    return value


def _optional_int(value: Any) -> Optional[int]:
    value = _clean(value)
    return None if value is None else int(value)


def _optional_float(value: Any) -> Optional[float]:
    value = _clean(value)
    return None if value is None else float(value)


class InMemoryGameFeed:
    """
    GameFeed over a sequence that is already sorted.

    The sequence is served exactly as given; ordering is checked by the
    driver, never repaired here.
    """

    def __init__(self, games: Sequence[Game], teams: Optional[Mapping[str, Team]] = None):
        self._games: List[Game] = list(games)
        self._teams: Dict[str, Team] = dict(teams or {})

    def __len__(self) -> int:
        return len(self._games)

    def games(self, seasons: Optional[Sequence[int]] = None) -> Iterator[Game]:
        wanted = set(seasons) if seasons is not None else None
        for game in self._games:
            if wanted is None or game.season in wanted:
                yield game

    def team(self, team_id: str) -> Team:
        """Display record for a team; unknown ids get a bare Team."""
        return self._teams.get(team_id, Team(team_id=team_id))

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        teams: Optional[Mapping[str, Team]] = None,
    ) -> "InMemoryGameFeed":
        """
        Build a feed from a DataFrame.

        Required columns: game_id, season, week, start_time, home_team,
        away_team. Optional: home_score, away_score, neutral_site, indoor,
        home_rest_days, away_rest_days, temperature_f, wind_speed_mph,
        precipitation_inches, snowfall_inches.

        Rows are sorted by (start_time, game_id) with a stable sort, which is
        the feed's job; the driver only checks.
        """
        validate_game_frame(df)

        data = df.copy()
        data["start_time"] = pd.to_datetime(data["start_time"], utc=True)
        data["game_id"] = data["game_id"].astype(str)
        data = data.sort_values(["start_time", "game_id"], kind="mergesort").reset_index(drop=True)

        games = [_game_from_row(row) for row in data.to_dict("records")]
        return cls(games, teams=teams)


def _game_from_row(row: Dict[str, Any]) -> Game:
    weather = None
    if any(_clean(row.get(col)) is not None for col in ("temperature_f", "wind_speed_mph")):
        weather = GameWeather(
            temperature_f=_optional_float(row.get("temperature_f")),
            wind_speed_mph=_optional_float(row.get("wind_speed_mph")),
            precipitation_inches=_optional_float(row.get("precipitation_inches")) or 0.0,
            snowfall_inches=_optional_float(row.get("snowfall_inches")) or 0.0,
        )

    context = GameContext(
        neutral_site=bool(_clean(row.get("neutral_site")) or False),
        indoor=bool(_clean(row.get("indoor")) or False),
        home_rest_days=_optional_int(row.get("home_rest_days")),
        away_rest_days=_optional_int(row.get("away_rest_days")),
        weather=weather,
    )

    return Game(
        game_id=str(row["game_id"]),
        season=int(row["season"]),
        week=int(row["week"]),
        start_time=row["start_time"].to_pydatetime(),
        home_team=str(row["home_team"]),
        away_team=str(row["away_team"]),
        home_score=_optional_int(row.get("home_score")),
        away_score=_optional_int(row.get("away_score")),
        context=context,
    )


class InMemoryMarketLineProvider:
    """MarketLineProvider backed by a dict keyed on game_id."""

    def __init__(self, lines: Iterable[MarketLine] = ()):
        self._lines: Dict[str, MarketLine] = {}
        for line in lines:
            if line.game_id in self._lines:
                raise ValueError(f"More than one market line for game {line.game_id}")
            self._lines[line.game_id] = line

    def __len__(self) -> int:
        return len(self._lines)

    def line_for(self, game_id: str) -> Optional[MarketLine]:
        # Untracked game: not bettable, not an error
        return self._lines.get(game_id)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, sportsbook: str = "consensus") -> "InMemoryMarketLineProvider":
        """
        Build a provider from a DataFrame with a game_id column and any of
        opening_spread, closing_spread, opening_total, closing_total,
        spread_price, total_price, sportsbook.
        """
        validate_line_frame(df)

        lines = []
        for row in df.to_dict("records"):
            lines.append(
                MarketLine(
                    game_id=str(row["game_id"]),
                    sportsbook=str(_clean(row.get("sportsbook")) or sportsbook),
                    opening_spread=_optional_float(row.get("opening_spread")),
                    closing_spread=_optional_float(row.get("closing_spread")),
                    opening_total=_optional_float(row.get("opening_total")),
                    closing_total=_optional_float(row.get("closing_total")),
                    spread_price=_optional_float(row.get("spread_price")),
                    total_price=_optional_float(row.get("total_price")),
                )
            )
        return cls(lines)
