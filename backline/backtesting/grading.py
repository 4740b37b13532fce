"""
Bet grading against a market line.

Spread (home perspective, negative = home favoured):
    edge = model_spread - market_spread
    side = home if edge < 0 else away
    home cover = actual_margin + market_spread
    away cover = -actual_margin - market_spread

Total:
    edge = model_total - market_total
    side = over if edge > 0 else under
    over cover = actual_total - market_total
    under cover = market_total - actual_total

cover > 0 wins, cover < 0 loses, cover == 0 (within tolerance) pushes.
Stakes are one unit; a win pays according to the American price.

CLV compares the bet line with the closing line, so it is only recorded
for bets placed at the opening line; closing execution leaves it None.
"""
import logging
from typing import Optional, Tuple

from backline.data.types import Game, LineTiming, MarketLine
from backline.backtesting.types import (
    BetOutcome,
    BetRecord,
    BetSide,
    EdgeStatus,
    Market,
    Projection,
    ReplayParameters,
)

logger = logging.getLogger(__name__)

PUSH_TOLERANCE = 1e-9


def calculate_bet_payout(
    bet_amount: float,
    odds: float,
    outcome: BetOutcome,
) -> Tuple[float, float]:
    """
    Calculate payout and profit from a bet.

    Args:
        bet_amount: Amount wagered
        odds: American odds (e.g., -110, +150)
        outcome: Graded result

    Returns:
        (payout, profit) where profit = payout - bet_amount
    """
    if outcome == BetOutcome.PUSH:
        return bet_amount, 0.0
    if outcome == BetOutcome.LOSS:
        return 0.0, -bet_amount

    if odds > 0:
        profit = bet_amount * (odds / 100)
    else:
        profit = bet_amount * (100 / abs(odds))

    return bet_amount + profit, profit


def classify_cover(cover: float) -> BetOutcome:
    if abs(cover) <= PUSH_TOLERANCE:
        return BetOutcome.PUSH
    return BetOutcome.WIN if cover > 0 else BetOutcome.LOSS


def spread_side(edge: float) -> BetSide:
    return BetSide.HOME if edge < 0 else BetSide.AWAY


def total_side(edge: float) -> BetSide:
    return BetSide.OVER if edge > 0 else BetSide.UNDER


def spread_cover(side: BetSide, actual_margin: float, market_spread: float) -> float:
    if side == BetSide.HOME:
        return actual_margin + market_spread
    if side == BetSide.AWAY:
        return -actual_margin - market_spread
    raise ValueError(f"{side.value} is not a spread side")


def total_cover(side: BetSide, actual_total: float, market_total: float) -> float:
    if side == BetSide.OVER:
        return actual_total - market_total
    if side == BetSide.UNDER:
        return market_total - actual_total
    raise ValueError(f"{side.value} is not a total side")


def closing_line_value(side: BetSide, bet_line: float, closing_line: Optional[float]) -> Optional[float]:
    """
    Points of line movement in the bet's favour between bet time and close.

    Positive means the market moved toward the model.
    """
    if closing_line is None:
        return None
    if side in (BetSide.HOME, BetSide.UNDER):
        return bet_line - closing_line
    return closing_line - bet_line


def edge_status(edge: float, min_edge: float, max_edge: Optional[float]) -> EdgeStatus:
    """Is |edge| inside the acceptance band [min_edge, max_edge]?"""
    magnitude = abs(edge)
    if magnitude < min_edge:
        return EdgeStatus.BELOW_MIN_EDGE
    if max_edge is not None and magnitude > max_edge:
        return EdgeStatus.ABOVE_MAX_EDGE
    return EdgeStatus.BET


def grade_spread(
    model_spread: float,
    market_spread: float,
    home_score: int,
    away_score: int,
    price: float,
) -> Tuple[BetSide, BetOutcome, float]:
    """
    Grade a one-unit spread bet on the side the model prefers.

    Returns:
        (side, outcome, profit)
    """
    edge = model_spread - market_spread
    side = spread_side(edge)
    outcome = classify_cover(spread_cover(side, home_score - away_score, market_spread))
    _, profit = calculate_bet_payout(1.0, price, outcome)
    return side, outcome, profit


def grade_total(
    model_total: float,
    market_total: float,
    home_score: int,
    away_score: int,
    price: float,
) -> Tuple[BetSide, BetOutcome, float]:
    """One-unit over/under bet on the side the model prefers."""
    edge = model_total - market_total
    side = total_side(edge)
    outcome = classify_cover(total_cover(side, home_score + away_score, market_total))
    _, profit = calculate_bet_payout(1.0, price, outcome)
    return side, outcome, profit


def _market_values(line: MarketLine, market: Market, timing: LineTiming):
    if market == Market.SPREAD:
        return line.spread_at(timing), line.closing_spread, line.spread_price
    return line.total_at(timing), line.closing_total, line.total_price


def grade_market(
    game: Game,
    projection: Projection,
    line: Optional[MarketLine],
    market: Market,
    params: ReplayParameters,
) -> Tuple[Optional[BetRecord], EdgeStatus]:
    """
    Decide and grade the bet for one market of one game.

    No bet (and no error) when the market is disabled, the line or the
    final score is missing, either team is below min_games_played, or the
    edge falls outside the acceptance band. Edges above max_edge are
    logged as suspect data.
    """
    if market.value not in params.markets:
        return None, EdgeStatus.MARKET_DISABLED
    if line is None:
        return None, EdgeStatus.NO_LINE

    bet_line, closing, line_price = _market_values(line, market, params.execution)
    if bet_line is None:
        return None, EdgeStatus.NO_LINE

    model_line = projection.model_spread if market == Market.SPREAD else projection.model_total
    edge = model_line - bet_line

    status = edge_status(edge, params.min_edge, params.max_edge)
    if status == EdgeStatus.ABOVE_MAX_EDGE:
        logger.warning(
            "Game %s %s edge %.2f exceeds max_edge %.2f; flagged, not bet",
            game.game_id,
            market.value,
            edge,
            params.max_edge,
        )
    if status != EdgeStatus.BET:
        return None, status

    played = min(projection.home_rating.games_played, projection.away_rating.games_played)
    if played < params.min_games_played:
        return None, EdgeStatus.INSUFFICIENT_GAMES
    if not game.is_final:
        return None, EdgeStatus.NOT_FINAL

    price = line_price if line_price is not None else params.price_american
    # a bet at the close has no line movement to measure
    clv = None
    if params.execution == LineTiming.OPENING:
        clv = closing_line_value(side, bet_line, closing)
    grader = grade_spread if market == Market.SPREAD else grade_total
    side, outcome, profit = grader(model_line, bet_line, game.home_score, game.away_score, price)

    bet = BetRecord(
        game_id=game.game_id,
        season=game.season,
        week=game.week,
        market=market,
        side=side,
        model_line=model_line,
        bet_line=bet_line,
        edge=edge,
        price=price,
        outcome=outcome,
        profit=profit,
        closing_line=closing,
        clv_points=clv,
    )
    return bet, EdgeStatus.BET
