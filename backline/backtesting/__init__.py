"""
Walk-forward replay: driver, bet grading, metrics, configurations and tuning.
"""

from backline.backtesting.types import (
    BetOutcome,
    BetRecord,
    BetSide,
    EdgeStatus,
    Market,
    MarketSummary,
    MetricsReport,
    Projection,
    ReplayParameters,
    ReplayRecord,
)
from backline.backtesting.configs import REPLAY_CONFIGS, get_config
from backline.backtesting.driver import DriverState, ReplayResult, WalkForwardDriver, replay
from backline.backtesting.metrics import summarize

__all__ = [
    "BetOutcome",
    "BetRecord",
    "BetSide",
    "EdgeStatus",
    "Market",
    "MarketSummary",
    "MetricsReport",
    "Projection",
    "ReplayParameters",
    "ReplayRecord",
    "REPLAY_CONFIGS",
    "get_config",
    "DriverState",
    "ReplayResult",
    "WalkForwardDriver",
    "replay",
    "summarize",
]
