"""
Evaluation metrics for a replay.

All metric functions take bets or records and return plain floats. Empty
inputs and zero denominators give 0.0, never NaN.
"""
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from backline.backtesting.types import (
    BetOutcome,
    BetRecord,
    MarketSummary,
    MetricsReport,
    ReplayRecord,
)

# Absolute edge buckets in points: (label, low, high)
EDGE_BUCKETS: List[Tuple[str, float, Optional[float]]] = [
    ("0-2", 0.0, 2.0),
    ("2-4", 2.0, 4.0),
    ("4-6", 4.0, 6.0),
    ("6+", 6.0, None),
]


def count_outcomes(bets: Sequence[BetRecord]) -> Tuple[int, int, int]:
    """
    Returns:
        (wins, losses, pushes)
    """
    wins = sum(1 for b in bets if b.outcome == BetOutcome.WIN)
    losses = sum(1 for b in bets if b.outcome == BetOutcome.LOSS)
    pushes = sum(1 for b in bets if b.outcome == BetOutcome.PUSH)
    return wins, losses, pushes


def calculate_win_rate(bets: Sequence[BetRecord]) -> float:
    """wins / (wins + losses); pushes are excluded."""
    wins, losses, _ = count_outcomes(bets)
    decided = wins + losses
    return wins / decided if decided > 0 else 0.0


def calculate_roi(bets: Sequence[BetRecord]) -> Tuple[float, float]:
    """
    ROI per decided bet at a one-unit stake.

    Returns:
        (total_profit, roi) where roi = total_profit / (wins + losses)
    """
    wins, losses, _ = count_outcomes(bets)
    total_profit = float(sum(b.profit for b in bets))
    decided = wins + losses
    roi = total_profit / decided if decided > 0 else 0.0
    return total_profit, roi


def calculate_mean_error(projected: Sequence[float], actual: Sequence[float]) -> float:
    """Mean signed error (projected - actual); positive = over-projected."""
    if len(projected) == 0:
        return 0.0
    return float(np.mean(np.asarray(projected, dtype=float) - np.asarray(actual, dtype=float)))


def calculate_mae(projected: Sequence[float], actual: Sequence[float]) -> float:
    if len(projected) == 0:
        return 0.0
    return float(np.mean(np.abs(np.asarray(projected, dtype=float) - np.asarray(actual, dtype=float))))


def calculate_rmse(projected: Sequence[float], actual: Sequence[float]) -> float:
    if len(projected) == 0:
        return 0.0
    errors = np.asarray(projected, dtype=float) - np.asarray(actual, dtype=float)
    return float(np.sqrt(np.mean(errors ** 2)))


def calculate_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation.

    Returns 0.0 with fewer than two points or when either series has zero
    variance.
    """
    if len(x) < 2 or len(x) != len(y):
        return 0.0
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    x_dev = x_arr - x_arr.mean()
    y_dev = y_arr - y_arr.mean()
    denom = np.sqrt(np.sum(x_dev ** 2) * np.sum(y_dev ** 2))
    if denom == 0:
        return 0.0
    return float(np.sum(x_dev * y_dev) / denom)


def calculate_clv(bets: Sequence[BetRecord]) -> Tuple[float, float, int, int]:
    """
    Closing Line Value.

    CLV rate is the fraction of bets whose line moved toward the model
    between bet time and close. Bets without a closing line are skipped.

    Returns:
        (clv_rate, average_clv_points, clv_wins, clv_total)
    """
    values = [b.clv_points for b in bets if b.clv_points is not None]
    if not values:
        return 0.0, 0.0, 0, 0
    clv_wins = sum(1 for v in values if v > 0)
    return clv_wins / len(values), float(np.mean(values)), clv_wins, len(values)


def calculate_edge_bucket_win_rates(bets: Sequence[BetRecord]) -> Dict[str, Optional[float]]:
    """Win rate per absolute-edge bucket; None for empty buckets."""
    result: Dict[str, Optional[float]] = {}
    for label, low, high in EDGE_BUCKETS:
        in_bucket = [
            b for b in bets if b.abs_edge >= low and (high is None or b.abs_edge < high)
        ]
        wins, losses, _ = count_outcomes(in_bucket)
        result[label] = wins / (wins + losses) if wins + losses > 0 else None
    return result


def calculate_max_drawdown(bets: Sequence[BetRecord]) -> float:
    """Largest peak-to-trough fall of cumulative profit, in units."""
    if not bets:
        return 0.0
    curve = np.concatenate([[0.0], np.cumsum([b.profit for b in bets])])
    peaks = np.maximum.accumulate(curve)
    return float(np.max(peaks - curve))


def summarize_bets(bets: Sequence[BetRecord]) -> MarketSummary:
    wins, losses, pushes = count_outcomes(bets)
    total_profit, roi = calculate_roi(bets)
    clv_rate, avg_clv, _, _ = calculate_clv(bets)
    return MarketSummary(
        bets=len(bets),
        wins=wins,
        losses=losses,
        pushes=pushes,
        win_rate=calculate_win_rate(bets),
        profit=total_profit,
        roi=roi,
        avg_abs_edge=float(np.mean([b.abs_edge for b in bets])) if bets else 0.0,
        clv_rate=clv_rate,
        avg_clv=avg_clv,
    )


def summarize(records: Iterable[ReplayRecord]) -> MetricsReport:
    """
    Aggregate a replay into a MetricsReport.

    Projection accuracy is measured on final games only: the projected
    margin (-model_spread) against the actual home margin.
    """
    records = list(records)
    final = [r for r in records if r.game.is_final]

    projected = [r.projection.projected_margin for r in final]
    actual = [float(r.game.actual_margin) for r in final]
    projected_totals = [r.projection.model_total for r in final]
    actual_totals = [float(r.game.actual_total) for r in final]

    bets = [bet for r in records for bet in r.bets]

    by_market: Dict[str, MarketSummary] = {}
    for market in sorted({b.market.value for b in bets}):
        by_market[market] = summarize_bets([b for b in bets if b.market.value == market])

    by_season: Dict[int, MarketSummary] = {}
    for season in sorted({b.season for b in bets}):
        by_season[season] = summarize_bets([b for b in bets if b.season == season])

    return MetricsReport(
        games=len(records),
        projections=len(records),
        graded_games=len(final),
        mean_error=calculate_mean_error(projected, actual),
        mae=calculate_mae(projected, actual),
        rmse=calculate_rmse(projected, actual),
        correlation=calculate_correlation(projected, actual),
        overall=summarize_bets(bets),
        max_drawdown=calculate_max_drawdown(bets),
        by_market=by_market,
        by_season=by_season,
        edge_buckets=calculate_edge_bucket_win_rates(bets),
        total_mae=calculate_mae(projected_totals, actual_totals) if final else None,
    )
