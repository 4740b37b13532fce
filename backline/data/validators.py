"""
Validation of incoming game feeds.

CRITICAL: the engine never reorders a feed. Anything out of order is
surfaced to the caller with the offending game identifiers.
"""
from datetime import datetime
from typing import List, Optional, Set

import pandas as pd

from backline.core.exceptions import DuplicateGameError, FeedOrderError
from backline.data.types import Game


REQUIRED_GAME_COLUMNS = [
    "game_id", "season", "week", "start_time", "home_team", "away_team",
]

REQUIRED_LINE_COLUMNS = ["game_id"]


def validate_game_frame(df: pd.DataFrame) -> None:
    """
    Validate a games DataFrame before it is turned into Game records.

    Raises:
        ValueError: If required columns are missing or a game lists the same
            team on both sides
        DuplicateGameError: If a game_id appears more than once
    """
    missing = [col for col in REQUIRED_GAME_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    duplicated = df["game_id"].astype(str)
    dupes = duplicated[duplicated.duplicated()].unique().tolist()
    if dupes:
        raise DuplicateGameError(f"Duplicate game ids in feed: {dupes[:5]}", dupes)

    same_team = df[df["home_team"] == df["away_team"]]
    if not same_team.empty:
        raise ValueError(
            f"Games with identical home and away team: "
            f"{same_team['game_id'].astype(str).tolist()[:5]}"
        )


def validate_line_frame(df: pd.DataFrame) -> None:
    """Validate a market-lines DataFrame."""
    missing = [col for col in REQUIRED_LINE_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    ids = df["game_id"].astype(str)
    dupes = ids[ids.duplicated()].unique().tolist()
    if dupes:
        raise ValueError(f"More than one market line for games: {dupes[:5]}")


class FeedGuard:
    """
    Incremental order check for a game stream.

    Enforces strictly ascending (start_time, game_id), non-decreasing
    season and week, unique game ids, and that no team plays two games at
    the same timestamp.
    """

    def __init__(self):
        self.last: Optional[Game] = None
        self._seen: Set[str] = set()
        self._teams_at_time: Set[str] = set()
        self._current_time: Optional[datetime] = None

    def check(self, game: Game) -> None:
        if game.game_id in self._seen:
            raise DuplicateGameError(
                f"Game {game.game_id} appears more than once in the feed",
                [game.game_id],
            )

        if game.home_team == game.away_team:
            raise FeedOrderError(
                f"Game {game.game_id} lists {game.home_team} on both sides",
                [game.game_id],
            )

        prev = self.last
        if prev is not None:
            if game.sort_key <= prev.sort_key:
                raise FeedOrderError(
                    f"Game {game.game_id} ({game.start_time.isoformat()}) is out of "
                    f"order after {prev.game_id} ({prev.start_time.isoformat()})",
                    [prev.game_id, game.game_id],
                )
            if game.season < prev.season:
                raise FeedOrderError(
                    f"Season went backwards: {prev.game_id} is season {prev.season}, "
                    f"{game.game_id} is season {game.season}",
                    [prev.game_id, game.game_id],
                )
            if game.season == prev.season and game.week < prev.week:
                raise FeedOrderError(
                    f"Week went backwards in season {game.season}: {prev.game_id} is "
                    f"week {prev.week}, {game.game_id} is week {game.week}",
                    [prev.game_id, game.game_id],
                )

        if game.start_time != self._current_time:
            self._current_time = game.start_time
            self._teams_at_time = set()

        clash = self._teams_at_time.intersection(game.teams)
        if clash:
            raise FeedOrderError(
                f"Team(s) {sorted(clash)} play twice at {game.start_time.isoformat()} "
                f"(game {game.game_id})",
                [game.game_id],
            )

        self._teams_at_time.update(game.teams)
        self._seen.add(game.game_id)
        self.last = game


def validate_chronological_order(games: List[Game]) -> None:
    """
    Validate a whole sequence of games at once.

    Raises:
        FeedOrderError / DuplicateGameError on the first violation
    """
    guard = FeedGuard()
    for game in games:
        guard.check(game)
