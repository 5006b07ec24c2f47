"""
Strategy statistics derived from a payoff curve.

Max profit/loss, break-even moves, net premium, capital at risk and the
current mark-to-intrinsic P/L.  Pure functions; degenerate input yields an
all-zero ``StrategyStats`` rather than an error.
"""

import logging
from typing import List, Optional, Sequence

from shared.constants import BREAK_EVEN_DECIMALS, PRICE_DECIMALS, UNLIMITED_THRESHOLD
from strategies.base import Leg, PayoffBound, PayoffCurve, StrategyStats
from strategies.payoff import calculate_net_premium, calculate_strategy_payoff

logger = logging.getLogger(__name__)


def detect_bounds(returns: Sequence[float]) -> tuple:
    """Max profit and max loss of a sampled curve.

    Unboundedness is judged from the slope of the two outermost samples on
    each edge: a rising right edge past ``UNLIMITED_THRESHOLD`` is unlimited
    profit; a falling left edge or falling right edge below
    ``-UNLIMITED_THRESHOLD`` is unlimited loss.  This is a sampling
    heuristic, not a proof: a wider sweep catches more unbounded legs.

    Returns:
        ``(max_profit, max_loss)`` as ``PayoffBound``; max loss is positive.
    """
    first = returns[0]
    second = returns[1] if len(returns) > 1 else first
    last = returns[-1]
    prev = returns[-2] if len(returns) > 1 else last

    left_slope = second - first
    right_slope = last - prev

    profit_unlimited = right_slope > 0 and last > UNLIMITED_THRESHOLD
    loss_unlimited = (
        (left_slope > 0 and first < -UNLIMITED_THRESHOLD)
        or (right_slope < 0 and last < -UNLIMITED_THRESHOLD)
    )

    max_profit = PayoffBound.unbounded() if profit_unlimited else PayoffBound.limited(max(returns))
    max_loss = PayoffBound.unbounded() if loss_unlimited else PayoffBound.limited(abs(min(returns)))
    return max_profit, max_loss


def find_break_evens(variations: Sequence[float], returns: Sequence[float]) -> List[float]:
    """Zero crossings of the curve as percentage moves, ascending.

    Each sign change between consecutive samples (a sample of exactly zero
    counts as the crossing's left end) is linearly interpolated.  Results are
    rounded to ``BREAK_EVEN_DECIMALS`` and deduplicated.
    """
    found = set()
    for i in range(len(returns) - 1):
        a = returns[i]
        b = returns[i + 1]
        if not ((a <= 0 < b) or (a >= 0 > b)):
            continue
        t = (0 - a) / (b - a)
        move = variations[i] + t * (variations[i + 1] - variations[i])
        found.add(round(move * 100, BREAK_EVEN_DECIMALS))
    return sorted(found)


def _pct_of(amount: Optional[float], base: Optional[float]) -> Optional[float]:
    if amount is None or not base or base <= 0:
        return None
    return amount / base * 100


def calculate_strategy_stats(
    legs: Sequence[Leg],
    curve: PayoffCurve,
    current_price: float,
) -> StrategyStats:
    """Summarize a strategy's payoff curve.

    Args:
        legs: The strategy legs the curve was built from.
        curve: Payoff curve (normally ``build_price_curve``).
        current_price: Current underlying price.

    Returns:
        StrategyStats snapshot.
    """
    if curve.is_empty:
        logger.debug("Empty payoff curve; returning zero stats")
        return StrategyStats()

    max_profit, max_loss = detect_bounds(curve.returns)
    break_evens = find_break_evens(curve.variations, curve.returns)
    net_premium = calculate_net_premium(legs)
    spot_pnl = calculate_strategy_payoff(legs, current_price)

    if net_premium < 0:
        capital_at_risk = abs(net_premium)
    else:
        capital_at_risk = max_loss.as_number()

    max_profit_pct = _pct_of(max_profit.as_number(), capital_at_risk)
    loss_amount = max_loss.as_number()
    max_loss_pct = _pct_of(-loss_amount if loss_amount is not None else None, capital_at_risk)

    base = curve.base_price
    break_even_prices = tuple(round(base * (1 + move / 100), PRICE_DECIMALS) for move in break_evens)

    return StrategyStats(
        max_profit=max_profit,
        max_loss=max_loss,
        break_evens=tuple(break_evens),
        break_even_prices=break_even_prices,
        net_premium=net_premium,
        capital_at_risk=capital_at_risk,
        max_profit_pct=max_profit_pct,
        max_loss_pct=max_loss_pct,
        spot_pnl=spot_pnl,
    )
