"""Internal rate of return for periodic cash-flow series."""

import logging
from typing import List, Optional, Sequence

import numpy as np

from shared.constants import (
    IRR_INITIAL_GUESS,
    IRR_LOWER_BOUND,
    IRR_UPPER_BOUND,
)
from shared.solvers import find_root

logger = logging.getLogger(__name__)

# Rates at or below this make the discount factor vanish.
_RATE_FLOOR = -0.999999


def npv(cash_flows: Sequence[float], rate: float) -> float:
    """Net present value of *cash_flows* (flow t discounted t periods)."""
    if rate <= _RATE_FLOOR:
        return float('inf')
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    with np.errstate(over='ignore', divide='ignore', invalid='ignore'):
        return float(np.sum(flows / np.power(1.0 + rate, periods)))


def npv_derivative(cash_flows: Sequence[float], rate: float) -> float:
    """d(NPV)/d(rate)."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    with np.errstate(over='ignore', divide='ignore', invalid='ignore'):
        return float(np.sum(-periods * flows / np.power(1.0 + rate, periods + 1)))


def calculate_irr(cash_flows: Sequence[float]) -> Optional[float]:
    """Periodic IRR of *cash_flows*, or None when it cannot be solved.

    Newton-Raphson from 10% per period, falling back to bisection over
    ``(IRR_LOWER_BOUND, IRR_UPPER_BOUND)``.
    """
    if len(cash_flows) < 2:
        return None

    flows = list(cash_flows)
    rate = find_root(
        lambda r: npv(flows, r),
        IRR_INITIAL_GUESS,
        IRR_LOWER_BOUND,
        IRR_UPPER_BOUND,
        fprime=lambda r: npv_derivative(flows, r),
    )
    if rate is None:
        logger.debug("IRR unsolvable for %d cash flows (no sign change)", len(flows))
    return rate


def build_cash_flows(
    initial_capital: float,
    final_capital: float,
    num_periods: int,
    monthly_flow: float,
    periods_per_month: float = 1.0,
) -> List[float]:
    """Cash-flow vector for a backtest's IRR.

    ``[-initial, flow, ..., flow + final]`` with one entry per period.  When
    several periods make a month, the monthly flow lands only on periods that
    complete a month boundary; the others carry zero.
    """
    flows = [-initial_capital]
    for i in range(num_periods):
        if periods_per_month == 1:
            flows.append(monthly_flow)
        else:
            completes_month = ((i + 1) % periods_per_month) < 1
            flows.append(monthly_flow if completes_month else 0.0)
    flows[-1] += final_capital
    return flows


def periodic_to_monthly(rate: float, periods_per_month: float) -> float:
    """Compound a per-period rate up to a monthly rate."""
    if periods_per_month == 1:
        return rate
    return (1 + rate) ** periods_per_month - 1
