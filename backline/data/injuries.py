"""
Key-player availability reports.

A report is a pre-kickoff snapshot handed in with the game context. Uses
positional weighting so that a QB absence counts far more than a backup
punter being out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class InjuryStatus(str, Enum):
    """Injury designations."""

    ACTIVE = "active"
    QUESTIONABLE = "questionable"
    DOUBTFUL = "doubtful"
    OUT = "out"
    IR = "injured_reserve"
    PUP = "pup"


class Position(str, Enum):
    """Positional categories for weighting."""

    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    OL = "OL"
    DL = "DL"
    LB = "LB"
    DB = "DB"
    K = "K"
    P = "P"
    OTHER = "OTHER"


# Positional impact weights: QB absence is catastrophic, K/P minimal
POSITION_WEIGHTS: Dict[Position, float] = {
    Position.QB: 1.00,
    Position.RB: 0.40,
    Position.WR: 0.35,
    Position.TE: 0.25,
    Position.OL: 0.30,
    Position.DL: 0.30,
    Position.LB: 0.30,
    Position.DB: 0.30,
    Position.K: 0.05,
    Position.P: 0.05,
    Position.OTHER: 0.10,
}

# Probability a player actually misses the game based on designation
STATUS_MISS_PROBABILITY: Dict[InjuryStatus, float] = {
    InjuryStatus.ACTIVE: 0.0,
    InjuryStatus.QUESTIONABLE: 0.50,
    InjuryStatus.DOUBTFUL: 0.85,
    InjuryStatus.OUT: 1.0,
    InjuryStatus.IR: 1.0,
    InjuryStatus.PUP: 1.0,
}


@dataclass(frozen=True)
class PlayerInjury:
    """Injury report entry for a single player."""

    player_name: str
    position: Position
    status: InjuryStatus
    is_starter: bool = True

    @property
    def expected_impact(self) -> float:
        """Positional weight times miss probability; 0 for non-starters."""
        if not self.is_starter:
            return 0.0
        return POSITION_WEIGHTS.get(self.position, 0.1) * STATUS_MISS_PROBABILITY[self.status]


@dataclass(frozen=True)
class TeamInjuryReport:
    """Aggregate injury report for one team for one game."""

    team: str
    injuries: Tuple[PlayerInjury, ...] = ()

    @property
    def qb1_active(self) -> bool:
        """Is the starting QB expected to play?"""
        for inj in self.injuries:
            if inj.position == Position.QB and inj.is_starter:
                return STATUS_MISS_PROBABILITY[inj.status] < 0.5
        return True  # no injury listed → active

    @property
    def key_players_out_count(self) -> int:
        """Number of starters expected to miss the game."""
        return sum(
            1
            for inj in self.injuries
            if inj.is_starter and STATUS_MISS_PROBABILITY[inj.status] >= 0.5
        )

    @property
    def availability_impact(self) -> float:
        """
        0.0 = fully healthy roster; higher = more impacted.

        Each absent starter adds their positional weight scaled by the
        probability that they miss the game.
        """
        return sum(inj.expected_impact for inj in self.injuries)
