"""
Input records handed to the engine by its collaborators.

The engine never fetches anything: games and market lines arrive as
already-identified, pre-sorted in-memory sequences.
"""

from backline.data.types import (
    Game,
    GameContext,
    GameWeather,
    LineTiming,
    MarketLine,
    Team,
)
from backline.data.injuries import (
    InjuryStatus,
    PlayerInjury,
    Position,
    TeamInjuryReport,
)
from backline.data.feed import (
    GameFeed,
    InMemoryGameFeed,
    InMemoryMarketLineProvider,
    MarketLineProvider,
)

__all__ = [
    "Game",
    "GameContext",
    "GameWeather",
    "LineTiming",
    "MarketLine",
    "Team",
    "InjuryStatus",
    "PlayerInjury",
    "Position",
    "TeamInjuryReport",
    "GameFeed",
    "MarketLineProvider",
    "InMemoryGameFeed",
    "InMemoryMarketLineProvider",
]
