"""
Expiry payoff helpers for multi-leg option strategies.

Intrinsic value only: no time value, no Greeks.  No external dependencies
beyond math; every function is pure and never mutates its inputs.
"""

import logging
import math
from enum import Enum
from typing import Iterable, List, Sequence

from shared.constants import (
    FLAT_BUFFER_FRACTION,
    PAYOFF_POINTS,
    PAYOFF_RANGE_PCT,
    PRICE_DECIMALS,
    PROFIT_DECIMALS,
    STRIKE_BUFFER_FRACTION,
    VARIATION_DECIMALS,
)
from strategies.base import Instrument, Leg, OptionType, PayoffCurve, Side

logger = logging.getLogger(__name__)


class SweepMode(str, Enum):
    """How the payoff curve's sample domain is chosen."""
    PRICE = "price"   # strikes/entries +/- buffer, for the strategy display
    MOVE = "move"     # fixed +/- percentage window, for backtest interpolation


def calculate_leg_payoff(leg: Leg, underlying_price: float) -> float:
    """Signed P/L of one leg at expiry for a hypothetical underlying price.

    Args:
        leg: Position leg.
        underlying_price: Hypothetical underlying price (>= 0).

    Returns:
        Profit (positive) or loss (negative) in currency.
    """
    if leg.instrument == Instrument.UNDERLYING:
        move = underlying_price - leg.premium
        pnl = move if leg.side == Side.BUY else -move
        return pnl * leg.quantity * leg.multiplier

    if not leg.is_complete:
        return 0.0

    if leg.option_type == OptionType.CALL:
        pnl = max(0.0, underlying_price - leg.strike) - leg.premium
    else:
        pnl = max(0.0, leg.strike - underlying_price) - leg.premium

    if leg.side == Side.SELL:
        pnl = -pnl

    return pnl * leg.quantity * leg.multiplier


def calculate_strategy_payoff(legs: Iterable[Leg], underlying_price: float) -> float:
    """Sum of leg payoffs at one underlying price (unrounded)."""
    total = 0.0
    for leg in legs:
        total += calculate_leg_payoff(leg, underlying_price)
    return total


def calculate_net_premium(legs: Iterable[Leg]) -> float:
    """Net premium of the strategy: credits positive, debits negative."""
    total = 0.0
    for leg in legs:
        leg_premium = leg.premium * leg.quantity * leg.multiplier
        total += leg_premium if leg.side == Side.SELL else -leg_premium
    return total


# The backtest screen calls the same quantity the strategy's cost.
calculate_strategy_cost = calculate_net_premium


def _valid_base_price(legs: Sequence[Leg], base_price: float) -> bool:
    return bool(legs) and math.isfinite(base_price) and base_price > 0


def _reference_prices(legs: Sequence[Leg], current_price: float) -> List[float]:
    """Current price, option strikes and underlying entries that are positive."""
    refs = [current_price]
    for leg in legs:
        if leg.instrument == Instrument.OPTION:
            if leg.strike is not None:
                refs.append(leg.strike)
        else:
            refs.append(leg.premium)
    return [p for p in refs if math.isfinite(p) and p > 0]


def build_price_curve(
    legs: Sequence[Leg],
    current_price: float,
    points: int = PAYOFF_POINTS,
) -> PayoffCurve:
    """Sweep absolute prices spanning every strike and entry price.

    The domain ``[min_ref - buffer, max_ref + buffer]`` (floored at zero) uses
    a buffer of half the reference range, or 20% of the max reference when the
    range is zero, or 1.  It is sampled at *points* intervals.
    """
    if not _valid_base_price(legs, current_price):
        return PayoffCurve(base_price=current_price)

    refs = _reference_prices(legs, current_price)
    low_ref = min(refs)
    high_ref = max(refs)

    buffer = (high_ref - low_ref) * STRIKE_BUFFER_FRACTION or high_ref * FLAT_BUFFER_FRACTION or 1
    start = max(0.0, low_ref - buffer)
    end = high_ref + buffer
    step = (end - start) / max(1, points)

    prices, variations, returns = [], [], []
    for i in range(points + 1):
        price = start + step * i
        profit = calculate_strategy_payoff(legs, price)
        prices.append(round(price, PRICE_DECIMALS))
        variations.append(round(price / current_price - 1, VARIATION_DECIMALS))
        returns.append(round(profit, PROFIT_DECIMALS))

    return PayoffCurve(
        base_price=current_price,
        variations=tuple(variations),
        returns=tuple(returns),
        prices=tuple(prices),
    )


def build_move_curve(
    legs: Sequence[Leg],
    base_price: float,
    range_pct: float = PAYOFF_RANGE_PCT,
    points: int = PAYOFF_POINTS,
) -> PayoffCurve:
    """Sweep a fixed +/- *range_pct* window of moves around *base_price*.

    Used as the interpolation table for backtests: a historical return of
    r maps onto the curve at variation r.
    """
    if not _valid_base_price(legs, base_price):
        return PayoffCurve(base_price=base_price)

    step = (range_pct * 2) / max(1, points)

    prices, variations, returns = [], [], []
    for i in range(points + 1):
        variation = -range_pct + step * i
        price = base_price * (1 + variation)
        profit = calculate_strategy_payoff(legs, price)
        prices.append(round(price, PRICE_DECIMALS))
        variations.append(round(variation, VARIATION_DECIMALS))
        returns.append(round(profit, PROFIT_DECIMALS))

    return PayoffCurve(
        base_price=base_price,
        variations=tuple(variations),
        returns=tuple(returns),
        prices=tuple(prices),
    )


def build_payoff_curve(
    legs: Sequence[Leg],
    current_price: float,
    mode: SweepMode = SweepMode.PRICE,
    points: int = PAYOFF_POINTS,
    range_pct: float = PAYOFF_RANGE_PCT,
) -> PayoffCurve:
    """Build a payoff curve with the sweep selected by *mode*."""
    if SweepMode(mode) == SweepMode.MOVE:
        return build_move_curve(legs, current_price, range_pct=range_pct, points=points)
    return build_price_curve(legs, current_price, points=points)


def derive_base_capital(strategy_cost: float, payoff_returns: Sequence[float]) -> float:
    """Capital a backtest compounds against.

    Net credit: the worst loss on the curve (or the credit when the curve
    never loses).  Net debit: the debit paid.  Zero cost: the magnitude of
    the curve minimum.
    """
    cost_abs = abs(strategy_cost)
    if not payoff_returns:
        return cost_abs

    min_payoff = min(payoff_returns)
    if strategy_cost > 0:
        risk = abs(min(0.0, min_payoff))
        return risk if risk > 0 else cost_abs

    if cost_abs > 0:
        return cost_abs
    return abs(min_payoff)
