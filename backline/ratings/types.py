"""
Rating records.

A Rating is an immutable value: every update produces a new version. The
store keeps all versions so that any (team, season, week) point can be
looked up after the fact.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Rating:
    """Skill rating for one team in one season, as of a point in the replay."""

    team_id: str
    season: int
    value: float
    games_played: int = 0

    # Replay position of the game that produced this version. week 0 and
    # updated_at None mean "seeded before the season started".
    week: int = 0
    updated_at: Optional[datetime] = None

    # Scoring components feeding the totals projection and form adjustment
    points_for: float = 0.0
    points_against: float = 0.0
    recent_margins: Tuple[float, ...] = ()
    last_played: Optional[datetime] = None

    @property
    def as_of(self) -> Tuple[int, int, Optional[datetime]]:
        return (self.season, self.week, self.updated_at)

    @property
    def avg_points_for(self) -> Optional[float]:
        if self.games_played == 0:
            return None
        return self.points_for / self.games_played

    @property
    def avg_points_against(self) -> Optional[float]:
        if self.games_played == 0:
            return None
        return self.points_against / self.games_played

    @property
    def avg_margin(self) -> Optional[float]:
        if self.games_played == 0:
            return None
        return (self.points_for - self.points_against) / self.games_played


@dataclass(frozen=True)
class RatingSnapshot:
    """Read-only copy of every team's rating at the end of a week."""

    season: int
    week: int
    ratings: Mapping[str, Rating] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "ratings", MappingProxyType(dict(self.ratings)))

    def __reduce__(self):
        # mappingproxy does not pickle
        return (self.__class__, (self.season, self.week, dict(self.ratings)))

    def __getitem__(self, team_id: str) -> Rating:
        return self.ratings[team_id]

    def __contains__(self, team_id: object) -> bool:
        return team_id in self.ratings

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.ratings))

    def __len__(self) -> int:
        return len(self.ratings)

    def get(self, team_id: str) -> Optional[Rating]:
        return self.ratings.get(team_id)

    def values_by_team(self) -> Dict[str, float]:
        return {team: self.ratings[team].value for team in sorted(self.ratings)}
