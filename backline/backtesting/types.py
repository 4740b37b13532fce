"""
Data structures for the walk-forward replay.
"""
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from backline.data.types import DEFAULT_PRICE_AMERICAN, Game, LineTiming, MarketLine
from backline.projections.spread import ProjectionParameters
from backline.ratings.elo import DEFAULT_RATING, EloParameters
from backline.ratings.season import SeasonTransition
from backline.ratings.types import Rating

MARKETS = ("spread", "total")


class Market(str, Enum):
    SPREAD = "spread"
    TOTAL = "total"


class BetSide(str, Enum):
    HOME = "home"
    AWAY = "away"
    OVER = "over"
    UNDER = "under"


class BetOutcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    PUSH = "push"


class EdgeStatus(str, Enum):
    """Why a bet was or was not graded for a market."""

    BET = "bet"
    BELOW_MIN_EDGE = "below_min_edge"
    ABOVE_MAX_EDGE = "above_max_edge"
    NO_LINE = "no_line"
    NOT_FINAL = "not_final"
    INSUFFICIENT_GAMES = "insufficient_games"
    MARKET_DISABLED = "market_disabled"


@dataclass(frozen=True)
class ReplayParameters:
    """
    Every constant a replay depends on.

    Passed explicitly into each run; two runs with equal parameters over the
    same inputs produce identical output.
    """

    # Rating update
    k_factor: float = 20.0
    home_field_elo: float = 100.0
    margin_coefficient: float = 0.8
    use_margin: bool = True
    k_taper_games: Optional[int] = None
    k_floor: float = 0.5
    max_delta: Optional[float] = None

    # Season transition
    league_average: float = DEFAULT_RATING
    carryover: float = 0.6

    # Projection
    scale_constant: float = 25.0
    home_field_points: float = 4.0
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

    # Betting
    min_edge: float = 0.0
    max_edge: Optional[float] = None
    price_american: float = DEFAULT_PRICE_AMERICAN
    execution: LineTiming = LineTiming.CLOSING  # CLV is only recorded for OPENING
    min_games_played: int = 0
    markets: Tuple[str, ...] = MARKETS

    def __post_init__(self):
        if self.min_edge < 0:
            raise ValueError(f"min_edge must be >= 0, got {self.min_edge}")
        if self.max_edge is not None and self.max_edge < self.min_edge:
            raise ValueError(
                f"max_edge ({self.max_edge}) must be >= min_edge ({self.min_edge})"
            )
        if -100.0 < self.price_american < 100.0:
            raise ValueError(f"price_american must be <= -100 or >= 100, got {self.price_american}")
        if self.min_games_played < 0:
            raise ValueError(f"min_games_played must be >= 0, got {self.min_games_played}")
        unknown = [m for m in self.markets if m not in MARKETS]
        if unknown:
            raise ValueError(f"Unknown market(s) {unknown}. Valid: {list(MARKETS)}")
        object.__setattr__(self, "markets", tuple(self.markets))
        object.__setattr__(self, "execution", LineTiming(self.execution))
        # Fail fast on invalid sub-parameters
        self.elo_parameters()
        self.season_transition()
        self.projection_parameters()

    def elo_parameters(self) -> EloParameters:
        return EloParameters(
            k_factor=self.k_factor,
            home_field_elo=self.home_field_elo,
            margin_coefficient=self.margin_coefficient,
            use_margin=self.use_margin,
            k_taper_games=self.k_taper_games,
            k_floor=self.k_floor,
            max_delta=self.max_delta,
            form_window=self.form_window,
        )

    def season_transition(self) -> SeasonTransition:
        return SeasonTransition(league_average=self.league_average, carryover=self.carryover)

    def projection_parameters(self) -> ProjectionParameters:
        return ProjectionParameters(
            scale_constant=self.scale_constant,
            home_field_points=self.home_field_points,
            max_rest_adjustment=self.max_rest_adjustment,
            form_window=self.form_window,
            form_weight=self.form_weight,
            max_form_adjustment=self.max_form_adjustment,
            points_per_impact=self.points_per_impact,
            max_availability_adjustment=self.max_availability_adjustment,
            league_average_total=self.league_average_total,
            pace_weight=self.pace_weight,
            max_pace_adjustment=self.max_pace_adjustment,
            max_weather_adjustment=self.max_weather_adjustment,
            round_to_half=self.round_to_half,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["execution"] = self.execution.value
        data["markets"] = list(self.markets)
        return data


@dataclass(frozen=True)
class Projection:
    """
    Model output for one game, with the ratings it was computed from.

    home_rating / away_rating are the exact rating versions read from the
    store; their as_of positions identify the snapshot used.
    """

    game_id: str
    season: int
    week: int
    model_spread: float  # negative = home favored
    model_total: float
    home_rating: Rating
    away_rating: Rating
    computed_at: datetime  # game start time: nothing at or after it was used
    spread_adjustments: Dict[str, float] = field(default_factory=dict)
    total_adjustments: Dict[str, float] = field(default_factory=dict)

    @property
    def projected_margin(self) -> float:
        """Home-minus-away margin implied by the spread."""
        return -self.model_spread

    @property
    def rating_as_of(self) -> Tuple[Tuple, Tuple]:
        return (self.home_rating.as_of, self.away_rating.as_of)


@dataclass(frozen=True)
class BetRecord:
    """One graded hypothetical bet at a flat one-unit stake."""

    game_id: str
    season: int
    week: int
    market: Market
    side: BetSide
    model_line: float
    bet_line: float
    edge: float  # model - market
    price: float  # American odds
    outcome: BetOutcome
    profit: float  # units
    closing_line: Optional[float] = None
    clv_points: Optional[float] = None

    @property
    def abs_edge(self) -> float:
        return abs(self.edge)

    @property
    def decided(self) -> bool:
        return self.outcome != BetOutcome.PUSH

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["market"] = self.market.value
        data["side"] = self.side.value
        data["outcome"] = self.outcome.value
        return data


@dataclass(frozen=True)
class ReplayRecord:
    """Everything the replay emits for one game."""

    game: Game
    projection: Projection
    line: Optional[MarketLine] = None
    spread_bet: Optional[BetRecord] = None
    total_bet: Optional[BetRecord] = None
    spread_status: EdgeStatus = EdgeStatus.NO_LINE
    total_status: EdgeStatus = EdgeStatus.NO_LINE

    @property
    def bets(self) -> List[BetRecord]:
        return [b for b in (self.spread_bet, self.total_bet) if b is not None]


@dataclass
class MarketSummary:
    """Betting results for one slice (a market, a season, or everything)."""

    bets: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    win_rate: float = 0.0
    profit: float = 0.0
    roi: float = 0.0
    avg_abs_edge: float = 0.0
    clv_rate: float = 0.0
    avg_clv: float = 0.0

    @property
    def record(self) -> str:
        """W-L-P string."""
        return f"{self.wins}-{self.losses}-{self.pushes}"


@dataclass
class MetricsReport:
    """Aggregate metrics over a replay."""

    games: int
    projections: int
    graded_games: int

    # Projection accuracy vs the actual home margin
    mean_error: float
    mae: float
    rmse: float
    correlation: float

    # Betting performance (all markets)
    overall: MarketSummary
    max_drawdown: float

    by_market: Dict[str, MarketSummary] = field(default_factory=dict)
    by_season: Dict[int, MarketSummary] = field(default_factory=dict)
    edge_buckets: Dict[str, Optional[float]] = field(default_factory=dict)

    # Total points accuracy
    total_mae: Optional[float] = None

    @property
    def win_rate(self) -> float:
        return self.overall.win_rate

    @property
    def roi(self) -> float:
        return self.overall.roi

    @property
    def clv_rate(self) -> float:
        return self.overall.clv_rate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "games": self.games,
            "projections": self.projections,
            "graded_games": self.graded_games,
            "mean_error": self.mean_error,
            "mae": self.mae,
            "rmse": self.rmse,
            "correlation": self.correlation,
            "total_mae": self.total_mae,
            "max_drawdown": self.max_drawdown,
            "overall": asdict(self.overall),
            "by_market": {k: asdict(v) for k, v in self.by_market.items()},
            "by_season": {k: asdict(v) for k, v in self.by_season.items()},
            "edge_buckets": dict(self.edge_buckets),
        }
