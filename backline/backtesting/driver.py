"""
Walk-forward replay driver.

Consumes a chronologically ordered game stream and, for each game:
1. Reads both teams' ratings as of the game's start (same-week games that
   started earlier are included, nothing later)
2. Emits a Projection
3. Grades bets against the market line when the game is final
4. Applies the rating update and writes the new versions back

Ratings are snapshotted at the end of every week. At a season boundary the
finished season is frozen and every known team is regressed toward the
league mean for the new season.

CRITICAL: The driver never reorders games. A feed that is out of order,
repeats a game, or lets a team play twice at one timestamp aborts the run.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Union

import joblib
import pandas as pd

from backline.backtesting.configs import get_config
from backline.backtesting.grading import grade_market
from backline.backtesting.metrics import summarize
from backline.backtesting.types import (
    BetRecord,
    Market,
    MetricsReport,
    Projection,
    ReplayParameters,
    ReplayRecord,
)
from backline.core.exceptions import BacklineError
from backline.data.feed import GameFeed, MarketLineProvider
from backline.data.types import Game
from backline.data.validators import FeedGuard
from backline.projections.spread import project_spread
from backline.projections.totals import project_total
from backline.ratings.elo import apply_game
from backline.ratings.season import carry_over
from backline.ratings.store import RatingStore
from backline.ratings.types import Rating, RatingSnapshot

logger = logging.getLogger(__name__)


class DriverState(str, Enum):
    AWAITING_SEASON_START = "awaiting_season_start"
    PROCESSING_WEEK = "processing_week"
    SEASON_BOUNDARY = "season_boundary"
    DONE = "done"


class WalkForwardDriver:
    """
    Single-use replay state machine.

    Example:
        >>> driver = WalkForwardDriver(get_config("reference"))
        >>> for record in driver.run(games, lines):
        ...     print(record.projection.model_spread)
    """

    def __init__(self, params: ReplayParameters, store: Optional[RatingStore] = None):
        """
        Initialize driver.

        Args:
            params: Replay constants
            store: Rating store to replay into (a fresh one by default)
        """
        self.params = params
        self.store = store or RatingStore(params.season_transition())
        self.state = DriverState.AWAITING_SEASON_START

        self._elo = params.elo_parameters()
        self._projection = params.projection_parameters()
        self._transition = params.season_transition()
        self._guard = FeedGuard()

        self._season: Optional[int] = None
        self._week: Optional[int] = None

        self.games_processed = 0
        self.games_rated = 0
        self.bets_graded = 0

    def run(
        self,
        games: Iterable[Game],
        lines: Optional[MarketLineProvider] = None,
    ) -> Iterator[ReplayRecord]:
        """
        Replay *games* in order, yielding one record per game.

        Raises:
            FeedOrderError / DuplicateGameError: Feed breaks its ordering contract
            PointInTimeViolation: A rating read or write would leak the future
        """
        if self.state != DriverState.AWAITING_SEASON_START:
            raise BacklineError(f"Driver already used (state: {self.state.value})")

        for game in games:
            self._guard.check(game)
            self._enter(game)
            yield self._process(game, lines)

        self._finish()

    # ------------------------------------------------------------------ #
    # State transitions
    # ------------------------------------------------------------------ #

    def _enter(self, game: Game) -> None:
        if self.state == DriverState.AWAITING_SEASON_START:
            self.store.advance_to(game.season, game.week)
            self._start_season(game)
        elif game.season != self._season:
            self.state = DriverState.SEASON_BOUNDARY
            self.store.advance_to(game.season, game.week)
            self._end_season()
            self._start_season(game)
        elif game.week != self._week:
            self.store.advance_to(game.season, game.week)
            self.store.snapshot(self._season, self._week)
            self._week = game.week

        self.store.advance_to(game.season, game.week, game.start_time)

    def _start_season(self, game: Game) -> None:
        prior = self.store.latest_ratings_before(game.season)
        self.store.seed_season(game.season, carry_over(prior, game.season, self._transition))
        if prior:
            logger.info(
                "Season %d: carried %d teams over (carryover %.2f toward %.1f)",
                game.season,
                len(prior),
                self._transition.carryover,
                self._transition.league_average,
            )
        else:
            logger.info("Season %d: no prior ratings, teams start at %.1f",
                        game.season, self._transition.league_average)

        self._season = game.season
        self._week = game.week
        self.state = DriverState.PROCESSING_WEEK

    def _end_season(self) -> None:
        self.store.snapshot(self._season, self._week)
        self.store.freeze(self._season)
        logger.info("Season %d complete after week %d", self._season, self._week)

    def _finish(self) -> None:
        self.store.close()
        if self._season is not None:
            self.store.snapshot(self._season, self._week)
        self.state = DriverState.DONE
        logger.info(
            "Replay complete: %d games, %d rated, %d bets",
            self.games_processed,
            self.games_rated,
            self.bets_graded,
        )

    # ------------------------------------------------------------------ #
    # Per-game processing
    # ------------------------------------------------------------------ #

    def _process(self, game: Game, lines: Optional[MarketLineProvider]) -> ReplayRecord:
        home = self.store.get(game.home_team, game.season, game.week, before=game.start_time)
        away = self.store.get(game.away_team, game.season, game.week, before=game.start_time)

        projection = self._project(game, home, away)

        line = lines.line_for(game.game_id) if lines is not None else None
        if line is None:
            logger.debug("No market line for game %s", game.game_id)

        spread_bet, spread_status = grade_market(game, projection, line, Market.SPREAD, self.params)
        total_bet, total_status = grade_market(game, projection, line, Market.TOTAL, self.params)

        if game.is_final:
            home_after, away_after = apply_game(home, away, game, self._elo)
            self.store.set(game.home_team, game.season, home_after)
            self.store.set(game.away_team, game.season, away_after)
            self.games_rated += 1

        self.games_processed += 1
        self.bets_graded += (spread_bet is not None) + (total_bet is not None)

        return ReplayRecord(
            game=game,
            projection=projection,
            line=line,
            spread_bet=spread_bet,
            total_bet=total_bet,
            spread_status=spread_status,
            total_status=total_status,
        )

    def _project(self, game: Game, home: Rating, away: Rating) -> Projection:
        spread, spread_adjustments = project_spread(home, away, game, self._projection)
        total, total_adjustments = project_total(home, away, game, self._projection)
        return Projection(
            game_id=game.game_id,
            season=game.season,
            week=game.week,
            model_spread=spread,
            model_total=total,
            home_rating=home,
            away_rating=away,
            computed_at=game.start_time,
            spread_adjustments=spread_adjustments,
            total_adjustments=total_adjustments,
        )


@dataclass
class ReplayResult:
    """Everything a completed replay produced."""

    parameters: ReplayParameters
    records: List[ReplayRecord] = field(default_factory=list)
    store: RatingStore = field(default_factory=RatingStore)

    @property
    def projections(self) -> List[Projection]:
        return [r.projection for r in self.records]

    @property
    def bets(self) -> List[BetRecord]:
        return [bet for r in self.records for bet in r.bets]

    def rating_snapshot(self, team_id: str, season: int, week: int) -> Rating:
        """Rating of *team_id* entering *week* of *season* (read-only)."""
        return self.store.rating_at(team_id, season, week)

    def snapshots(self) -> List[RatingSnapshot]:
        return self.store.snapshots()

    def summarize(self) -> MetricsReport:
        return summarize(self.records)

    def to_frame(self) -> pd.DataFrame:
        """One row per game: projection, market, result and bets."""
        timing = self.parameters.execution
        rows = []
        for r in self.records:
            g, p = r.game, r.projection
            row = {
                "game_id": g.game_id,
                "season": g.season,
                "week": g.week,
                "start_time": g.start_time,
                "home_team": g.home_team,
                "away_team": g.away_team,
                "home_score": g.home_score,
                "away_score": g.away_score,
                "home_rating": p.home_rating.value,
                "away_rating": p.away_rating.value,
                "model_spread": p.model_spread,
                "model_total": p.model_total,
                "market_spread": r.line.spread_at(timing) if r.line else None,
                "market_total": r.line.total_at(timing) if r.line else None,
                "spread_status": r.spread_status.value,
                "total_status": r.total_status.value,
            }
            for prefix, bet in (("spread", r.spread_bet), ("total", r.total_bet)):
                row[f"{prefix}_side"] = bet.side.value if bet else None
                row[f"{prefix}_outcome"] = bet.outcome.value if bet else None
                row[f"{prefix}_profit"] = bet.profit if bet else None
            rows.append(row)
        return pd.DataFrame(rows)

    def bets_to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([bet.to_dict() for bet in self.bets])

    def save(self, path: str) -> Path:
        """
        Save the result (records, rating history, parameters) with joblib.

        Args:
            path: File path (should end in .joblib)
        """
        save_path = Path(path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self, save_path)
        return save_path

    @classmethod
    def load(cls, path: str) -> "ReplayResult":
        """
        Load a saved result.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        load_path = Path(path)
        if not load_path.exists():
            raise FileNotFoundError(f"Replay result not found: {path}")
        return joblib.load(load_path)


def replay(
    games: Union[GameFeed, Iterable[Game]],
    lines: Optional[MarketLineProvider] = None,
    parameters: Optional[ReplayParameters] = None,
    seasons: Optional[Sequence[int]] = None,
) -> ReplayResult:
    """
    Replay *seasons* of *games* with *parameters* and return everything produced.

    Only returns once the whole stream has been replayed; a run that raises
    produces nothing.

    Args:
        games: A GameFeed or an ordered iterable of games
        lines: Market lines by game id (None = no betting)
        parameters: Replay constants (default: the configured named set)
        seasons: Restrict to these seasons

    Returns:
        ReplayResult
    """
    if parameters is None:
        parameters = get_config()

    if hasattr(games, "games"):
        stream = games.games(seasons)
    elif seasons is not None:
        wanted = set(seasons)
        stream = (g for g in games if g.season in wanted)
    else:
        stream = games

    driver = WalkForwardDriver(parameters)
    records = list(driver.run(stream, lines))
    return ReplayResult(parameters=parameters, records=records, store=driver.store)
