"""
Error taxonomy for the replay engine.

Unknown teams, missing market lines and unplayed games are NOT errors; they
are handled where they are looked up. Everything defined here is fatal for
the replay that raised it.
"""
from typing import Sequence


class BacklineError(Exception):
    """Base class for engine errors."""


class PointInTimeViolation(BacklineError):
    """Raised when a read or write would expose information from the future."""


class FeedError(BacklineError):
    """Raised when the game feed breaks its ordering contract."""

    def __init__(self, message: str, game_ids: Sequence[str] = ()):
        super().__init__(message)
        self.game_ids = tuple(game_ids)


class FeedOrderError(FeedError):
    """Games out of (timestamp, game_id) order, or season/week going backwards."""


class DuplicateGameError(FeedError):
    """The same game identifier appeared twice in one feed."""
