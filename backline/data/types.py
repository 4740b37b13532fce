"""
Data structures for games, context and market lines.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from backline.data.injuries import TeamInjuryReport


@dataclass(frozen=True)
class Team:
    """Opaque team identifier plus display name."""

    team_id: str
    name: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.team_id


@dataclass(frozen=True)
class GameWeather:
    """Kickoff weather for an outdoor game."""

    temperature_f: Optional[float] = None
    wind_speed_mph: Optional[float] = None
    precipitation_inches: float = 0.0
    snowfall_inches: float = 0.0

    @property
    def wind_chill(self) -> Optional[float]:
        """NWS wind chill; equals the temperature when it does not apply."""
        t = self.temperature_f
        v = self.wind_speed_mph
        if t is None:
            return None
        if v is not None and t <= 50 and v > 3:
            return 35.74 + 0.6215 * t - 35.75 * (v ** 0.16) + 0.4275 * t * (v ** 0.16)
        return t


@dataclass(frozen=True)
class GameContext:
    """Optional situational information known before kickoff."""

    neutral_site: bool = False
    indoor: bool = False

    # Days since each team's previous game. None = derive from ratings.
    home_rest_days: Optional[int] = None
    away_rest_days: Optional[int] = None

    weather: Optional[GameWeather] = None
    home_injuries: Optional[TeamInjuryReport] = None
    away_injuries: Optional[TeamInjuryReport] = None


@dataclass(frozen=True)
class Game:
    """
    One scheduled or completed game.

    Scores are None until the game is final. Games are totally ordered by
    (start_time, game_id).
    """

    game_id: str
    season: int
    week: int
    start_time: datetime
    home_team: str
    away_team: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    context: GameContext = field(default_factory=GameContext)

    @property
    def is_final(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    @property
    def actual_margin(self) -> Optional[int]:
        """Home score minus away score."""
        if not self.is_final:
            return None
        return self.home_score - self.away_score

    @property
    def actual_total(self) -> Optional[int]:
        if not self.is_final:
            return None
        return self.home_score + self.away_score

    @property
    def sort_key(self) -> Tuple[datetime, str]:
        return (self.start_time, self.game_id)

    @property
    def teams(self) -> Tuple[str, str]:
        return (self.home_team, self.away_team)


class LineTiming(str, Enum):
    """Which market snapshot a bet is executed against."""

    OPENING = "opening"
    CLOSING = "closing"


DEFAULT_PRICE_AMERICAN = -110.0


@dataclass(frozen=True)
class MarketLine:
    """
    Reference-book spread and total for one game.

    Spreads are home-perspective: negative = home favored. Any value may be
    None when the book never posted that market.
    """

    game_id: str
    sportsbook: str = "consensus"
    opening_spread: Optional[float] = None
    closing_spread: Optional[float] = None
    opening_total: Optional[float] = None
    closing_total: Optional[float] = None
    spread_price: Optional[float] = None  # American odds, e.g. -110
    total_price: Optional[float] = None

    def spread_at(self, timing: LineTiming) -> Optional[float]:
        if timing == LineTiming.OPENING:
            return self.opening_spread
        return self.closing_spread

    def total_at(self, timing: LineTiming) -> Optional[float]:
        if timing == LineTiming.OPENING:
            return self.opening_total
        return self.closing_total
