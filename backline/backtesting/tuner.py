"""
Grid search over replay parameters.

Each trial is an independent replay over the same feed with one parameter
combination; trials share no state, so they can run in parallel with
joblib.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from itertools import product
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from joblib import Parallel, delayed

from backline.backtesting.driver import replay
from backline.backtesting.types import ReplayParameters
from backline.core.config import settings
from backline.data.feed import MarketLineProvider
from backline.data.types import Game

logger = logging.getLogger(__name__)


@dataclass
class TuningTrial:
    """Single parameter trial."""

    parameters: Dict[str, Any]
    metrics: Dict[str, float]


@dataclass
class TuningResult:
    """Outcome of a tuning run."""

    optimize_metric: str
    higher_is_better: bool
    trials: List[TuningTrial] = field(default_factory=list)

    @property
    def best_trial(self) -> TuningTrial:
        if not self.trials:
            raise ValueError("No trials recorded")
        key = lambda t: t.metrics.get(self.optimize_metric, float("-inf"))
        return (max if self.higher_is_better else min)(self.trials, key=key)

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for t in self.trials:
            row = dict(t.parameters)
            row.update(t.metrics)
            rows.append(row)
        return pd.DataFrame(rows)


def _expand_grid(param_grid: Dict[str, List[Any]]) -> List[Dict[str, Any]]:
    """Cartesian product of parameter lists."""
    keys = list(param_grid.keys())
    values = list(param_grid.values())
    return [dict(zip(keys, combo)) for combo in product(*values)]


def _run_trial(
    games: Sequence[Game],
    lines: Optional[MarketLineProvider],
    params: ReplayParameters,
    overrides: Dict[str, Any],
) -> TuningTrial:
    report = replay(games, lines, params).summarize()
    metrics = {
        "roi": report.roi,
        "win_rate": report.win_rate,
        "bets": float(report.overall.bets),
        "profit": report.overall.profit,
        "mae": report.mae,
        "rmse": report.rmse,
        "correlation": report.correlation,
        "clv_rate": report.clv_rate,
        "max_drawdown": report.max_drawdown,
    }
    return TuningTrial(parameters=overrides, metrics=metrics)


def grid_search(
    games: Sequence[Game],
    lines: Optional[MarketLineProvider],
    param_grid: Dict[str, List[Any]],
    base: Optional[ReplayParameters] = None,
    optimize_metric: str = "roi",
    higher_is_better: bool = True,
    n_jobs: Optional[int] = None,
) -> TuningResult:
    """
    Exhaustive grid search over *param_grid*.

    Args:
        games: Ordered games, replayed once per trial
        lines: Market lines (None = accuracy metrics only)
        param_grid: dict mapping ReplayParameters field → list of values
        base: Parameters the grid overrides (default: ReplayParameters())
        optimize_metric: metric name (roi, win_rate, mae, rmse, ...)
        higher_is_better: direction of improvement
        n_jobs: joblib worker count (default: settings.TUNER_N_JOBS)

    Returns:
        TuningResult containing all trials in grid order.
    """
    base = base or ReplayParameters()
    valid_fields = {f.name for f in dataclasses.fields(ReplayParameters)}
    unknown = sorted(set(param_grid) - valid_fields)
    if unknown:
        raise ValueError(f"Unknown replay parameter(s) in grid: {unknown}")

    games = list(games)
    combos = _expand_grid(param_grid)
    # Invalid combinations fail here, before any replay runs
    candidates = [dataclasses.replace(base, **combo) for combo in combos]

    n_jobs = n_jobs if n_jobs is not None else settings.TUNER_N_JOBS
    logger.info("Grid search: %d trials, n_jobs=%d", len(combos), n_jobs)

    if n_jobs == 1:
        trials = [_run_trial(games, lines, p, c) for p, c in zip(candidates, combos)]
    else:
        trials = Parallel(n_jobs=n_jobs)(
            delayed(_run_trial)(games, lines, p, c) for p, c in zip(candidates, combos)
        )

    result = TuningResult(optimize_metric=optimize_metric, higher_is_better=higher_is_better)
    for trial in trials:
        logger.info("Trial %s: %s=%.4f", trial.parameters, optimize_metric,
                    trial.metrics.get(optimize_metric, float("nan")))
        result.trials.append(trial)

    return result
