"""
Payoff modules for multi-leg option strategies.

- payoff: leg payoff at expiry, payoff curve builders, premium helpers
- stats: max profit/loss, break-evens, capital at risk
"""

from strategies.base import (
    Leg, PayoffCurve, PayoffBound, StrategyStats,
    Instrument, Side, OptionType,
)
from strategies.payoff import (
    SweepMode,
    calculate_leg_payoff,
    calculate_strategy_payoff,
    calculate_net_premium,
    calculate_strategy_cost,
    build_price_curve,
    build_move_curve,
    build_payoff_curve,
    derive_base_capital,
)
from strategies.stats import calculate_strategy_stats, find_break_evens

__all__ = [
    "Leg", "PayoffCurve", "PayoffBound", "StrategyStats",
    "Instrument", "Side", "OptionType",
    "SweepMode",
    "calculate_leg_payoff",
    "calculate_strategy_payoff",
    "calculate_net_premium",
    "calculate_strategy_cost",
    "build_price_curve",
    "build_move_curve",
    "build_payoff_curve",
    "derive_base_capital",
    "calculate_strategy_stats",
    "find_break_evens",
]
