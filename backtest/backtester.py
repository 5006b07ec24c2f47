"""
Backtesting Engine
Replays a historical return series through a strategy's payoff curve.

Each period's underlying return is mapped onto the percentage-move payoff
curve, turned into a return on the strategy's base capital and compounded
on two equity tracks: one that pays out withdrawals / takes in
contributions, one that purely reinvests.  An optional synthetic loss
schedule haircuts both tracks to stress the result.
"""

import logging
import math
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from backtest.history import HistoryPoint
from backtest.irr import build_cash_flows, calculate_irr, periodic_to_monthly
from shared.constants import (
    ANCHOR_BUBBLE_SIZE,
    BUBBLE_SCALE,
    DAYS_PER_MONTH,
    LOSS_LARGE_EVERY_MONTHS,
    LOSS_LARGE_PCT,
    LOSS_MAX_PCT,
    LOSS_SMALL_EVERY_MONTHS,
    LOSS_SMALL_PCT,
    MAX_BUBBLE_SIZE,
    PAYOFF_POINTS,
    PAYOFF_RANGE_PCT,
    WEEKS_PER_MONTH,
)
from shared.types import AppConfig, MetricsDict
from strategies.base import Leg, PayoffCurve
from strategies.payoff import build_move_curve, calculate_strategy_cost, derive_base_capital

logger = logging.getLogger(__name__)


class BacktestFrequency(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"

    @property
    def periods_per_month(self) -> float:
        return WEEKS_PER_MONTH if self == BacktestFrequency.WEEKLY else 1


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BacktestRow:
    """One simulated period.

    ``strategy_return`` is the effective return after any synthetic loss and
    before cash flows; ``profit`` is the matching change on the reinvesting
    track; ``capital`` is the withdrawal track after cash flows.
    """
    time: datetime
    asset_return: float
    strategy_return: float
    profit: float
    withdrawal: float
    investment: float
    capital: float
    capital_without: float
    loss_event: bool = False

    @property
    def bubble_size(self) -> float:
        return min(MAX_BUBBLE_SIZE, ANCHOR_BUBBLE_SIZE + abs(self.strategy_return * 100) * BUBBLE_SCALE)


@dataclass(frozen=True)
class ChartPoint:
    time: datetime
    asset_return: float
    strategy_return: float
    size: float


@dataclass(frozen=True)
class EquityPoint:
    time: datetime
    capital_with: float
    capital_without: float


@dataclass(frozen=True)
class BacktestMetrics:
    """Aggregate performance of a run.  Rates and returns are percentages."""
    initial_capital: float
    final_capital_no_withdrawal: float
    final_capital_with_withdrawal: float
    total_profit_pct: float = 0.0
    avg_monthly_profit: float = 0.0
    monthly_equivalent_rate: float = 0.0
    profit_with_withdrawal_pct: float = 0.0
    monthly_rate_with_withdrawal: float = 0.0
    monthly_irr: float = 0.0
    wins: int = 0
    losses: int = 0

    @classmethod
    def empty(cls, capital: float) -> "BacktestMetrics":
        return cls(
            initial_capital=capital,
            final_capital_no_withdrawal=capital,
            final_capital_with_withdrawal=capital,
        )

    def to_dict(self) -> MetricsDict:
        return asdict(self)


@dataclass(frozen=True)
class BacktestResult:
    rows: Tuple[BacktestRow, ...]
    metrics: BacktestMetrics

    @property
    def chart_points(self) -> List[ChartPoint]:
        """Scatter of asset vs. strategy return, sized by |strategy return|."""
        return [
            ChartPoint(r.time, r.asset_return, r.strategy_return, r.bubble_size)
            for r in self.rows
        ]

    @property
    def equity_curve(self) -> List[EquityPoint]:
        return [EquityPoint(r.time, r.capital, r.capital_without) for r in self.rows]

    def to_frame(self) -> pd.DataFrame:
        """Rows as a DataFrame indexed by time."""
        if not self.rows:
            return pd.DataFrame(columns=[f for f in BacktestRow.__dataclass_fields__ if f != 'time'])
        return pd.DataFrame([asdict(r) for r in self.rows]).set_index('time')

    def equity_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame(
            [asdict(p) for p in self.equity_curve],
            columns=['time', 'capital_with', 'capital_without'],
        )
        return frame.set_index('time')


# ---------------------------------------------------------------------------
# Synthetic loss schedule
# ---------------------------------------------------------------------------

def synthetic_loss_pct(months_elapsed: int) -> float:
    """Haircut scheduled for a 1-indexed month count (0 when none)."""
    loss = 0.0
    if months_elapsed % LOSS_SMALL_EVERY_MONTHS == 0:
        loss += LOSS_SMALL_PCT
    if months_elapsed % LOSS_LARGE_EVERY_MONTHS == 0:
        loss += LOSS_LARGE_PCT
    return min(loss, LOSS_MAX_PCT)


@dataclass(frozen=True)
class LossClock:
    """Month counter for the synthetic loss schedule.

    The origin is the (year, month) of the first period seen; each counted
    month can trigger at most one loss.
    """
    origin: Optional[Tuple[int, int]] = None
    triggered: FrozenSet[int] = frozenset()

    def started(self, when: datetime) -> "LossClock":
        if self.origin is not None:
            return self
        return replace(self, origin=(when.year, when.month))

    def months_elapsed(self, when: datetime) -> int:
        year, month = self.origin
        return (when.year - year) * 12 + (when.month - month) + 1

    def charge(self, when: datetime) -> Tuple["LossClock", float]:
        """Loss due at *when* and the clock with that month consumed."""
        if self.origin is None:
            return self, 0.0
        months = self.months_elapsed(when)
        if months <= 0 or months in self.triggered:
            return self, 0.0
        loss = synthetic_loss_pct(months)
        if loss <= 0:
            return self, 0.0
        return replace(self, triggered=self.triggered | {months}), loss


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Policy:
    """Per-run constants of the simulation."""
    curve: PayoffCurve
    base_capital: float
    period_withdrawal: float
    period_investment: float
    apply_losses: bool


@dataclass(frozen=True)
class _SimState:
    """Accumulator threaded through the period fold."""
    capital_with: float
    capital_without: float
    clock: LossClock = field(default_factory=LossClock)
    anchored: bool = False
    wins: int = 0
    losses: int = 0


def interpolate_payoff(move: float, curve: PayoffCurve) -> float:
    """Strategy P/L for a fractional move, linear between samples.

    Moves outside the sampled window take the boundary value.
    """
    if curve.is_empty:
        return 0.0
    return float(np.interp(move, curve.variations, curve.returns))


def _step(state: _SimState, point: HistoryPoint, policy: _Policy) -> Tuple[_SimState, Optional[BacktestRow]]:
    """Advance the simulation by one history point."""
    clock = state.clock.started(point.time) if policy.apply_losses else state.clock
    asset_return = point.return_pct

    if asset_return is None or not math.isfinite(asset_return):
        if state.anchored:
            return replace(state, clock=clock), None
        anchor = BacktestRow(
            time=point.time,
            asset_return=0.0,
            strategy_return=0.0,
            profit=0.0,
            withdrawal=0.0,
            investment=0.0,
            capital=state.capital_with,
            capital_without=state.capital_without,
        )
        return replace(state, clock=clock, anchored=True), anchor

    profit = interpolate_payoff(asset_return, policy.curve)
    period_return = profit / policy.base_capital

    prev_without = state.capital_without
    capital_without = prev_without * (1 + period_return)
    capital_with = state.capital_with * (1 + period_return)

    loss = 0.0
    if policy.apply_losses:
        clock, loss = clock.charge(point.time)
    if loss > 0:
        capital_without *= 1 - loss
        capital_with *= 1 - loss

    profit_without = capital_without - prev_without
    capital_with = capital_with - policy.period_withdrawal + policy.period_investment
    effective = profit_without / prev_without if prev_without != 0 else 0.0

    row = BacktestRow(
        time=point.time,
        asset_return=asset_return,
        strategy_return=effective,
        profit=profit_without,
        withdrawal=policy.period_withdrawal,
        investment=policy.period_investment,
        capital=capital_with,
        capital_without=capital_without,
        loss_event=loss > 0,
    )
    next_state = _SimState(
        capital_with=capital_with,
        capital_without=capital_without,
        clock=clock,
        anchored=True,
        wins=state.wins + (1 if effective > 0 else 0),
        losses=state.losses + (1 if effective < 0 else 0),
    )
    return next_state, row


def _geometric_monthly_rate(final: float, initial: float, periods: int, frequency: BacktestFrequency) -> float:
    """Per-period geometric growth rate compounded to a monthly percentage."""
    if periods <= 0 or initial <= 0 or final <= 0:
        return 0.0
    per_period = (final / initial) ** (1 / periods) - 1
    return periodic_to_monthly(per_period, frequency.periods_per_month) * 100


def _summarize(
    rows: Sequence[BacktestRow],
    state: _SimState,
    base_capital: float,
    monthly_withdrawal: float,
    monthly_investment: float,
    frequency: BacktestFrequency,
) -> BacktestMetrics:
    final_without = rows[-1].capital_without if rows else base_capital
    final_with = rows[-1].capital if rows else base_capital

    total_profit = final_without - base_capital
    num_periods = max(0, len(rows) - 1)

    num_months = 0.0
    if len(rows) > 1:
        days = (rows[-1].time - rows[0].time).total_seconds() / 86400
        num_months = days / DAYS_PER_MONTH

    monthly_irr = 0.0
    if num_periods > 0:
        per_month = frequency.periods_per_month
        flows = build_cash_flows(
            base_capital, final_with, num_periods,
            monthly_withdrawal - monthly_investment, per_month,
        )
        irr = calculate_irr(flows)
        if irr is not None:
            monthly_irr = periodic_to_monthly(irr, per_month) * 100

    return BacktestMetrics(
        initial_capital=base_capital,
        final_capital_no_withdrawal=final_without,
        final_capital_with_withdrawal=final_with,
        total_profit_pct=total_profit / base_capital * 100,
        avg_monthly_profit=total_profit / num_months if num_months > 0 else 0.0,
        monthly_equivalent_rate=_geometric_monthly_rate(final_without, base_capital, num_periods, frequency),
        profit_with_withdrawal_pct=(final_with - base_capital) / base_capital * 100,
        monthly_rate_with_withdrawal=_geometric_monthly_rate(final_with, base_capital, num_periods, frequency),
        monthly_irr=monthly_irr,
        wins=state.wins,
        losses=state.losses,
    )


def run_backtest(
    history: Sequence[HistoryPoint],
    payoff: PayoffCurve,
    base_capital: float,
    monthly_withdrawal: float = 0.0,
    monthly_investment: float = 0.0,
    apply_losses: bool = False,
    frequency: BacktestFrequency = BacktestFrequency.MONTHLY,
) -> BacktestResult:
    """Simulate capital evolution of a strategy over a historical series.

    Args:
        history: Chronological HistoryPoints (ascending time).
        payoff: Percentage-move payoff curve (``build_move_curve``).
        base_capital: Capital the payoff is measured against.
        monthly_withdrawal: Cash taken out of the withdrawal track per month.
        monthly_investment: Cash added to the withdrawal track per month.
        apply_losses: Inject the synthetic loss schedule.
        frequency: Sampling frequency of *history*.

    Returns:
        BacktestResult.  Empty history, empty curve or non-positive capital
        give no rows and zero-filled metrics.
    """
    frequency = BacktestFrequency(frequency)
    capital = base_capital if base_capital > 0 else 0.0

    if not history or payoff.is_empty or capital <= 0:
        logger.debug(
            "Backtest skipped (history=%d, curve=%d, capital=%.2f)",
            len(history), len(payoff), capital,
        )
        return BacktestResult(rows=(), metrics=BacktestMetrics.empty(capital))

    per_month = frequency.periods_per_month
    policy = _Policy(
        curve=payoff,
        base_capital=capital,
        period_withdrawal=monthly_withdrawal / per_month,
        period_investment=monthly_investment / per_month,
        apply_losses=apply_losses,
    )

    state = _SimState(capital_with=capital, capital_without=capital)
    rows: List[BacktestRow] = []
    for point in history:
        state, row = _step(state, point, policy)
        if row is not None:
            rows.append(row)

    metrics = _summarize(rows, state, capital, monthly_withdrawal, monthly_investment, frequency)
    logger.info(
        "Backtest complete: %d periods, final capital $%.2f (%.2f%%), %d wins / %d losses",
        len(rows), metrics.final_capital_no_withdrawal, metrics.total_profit_pct,
        metrics.wins, metrics.losses,
    )
    return BacktestResult(rows=tuple(rows), metrics=metrics)


class PayoffBacktester:
    """
    Config-driven backtest of a leg set over a historical series.
    """

    def __init__(self, config: AppConfig):
        """
        Initialize backtester.

        Args:
            config: Configuration dictionary; reads the ``backtest`` and
                    (optional) ``payoff`` sections.
        """
        self.config = config
        self.backtest_config = config.get('backtest', {})
        self.payoff_config = config.get('payoff', {})

        self.frequency = BacktestFrequency(str(self.backtest_config.get('frequency', 'MONTHLY')).upper())
        self.monthly_withdrawal = float(self.backtest_config.get('monthly_withdrawal', 0.0))
        self.monthly_investment = float(self.backtest_config.get('monthly_investment', 0.0))
        self.apply_losses = bool(self.backtest_config.get('apply_losses', False))
        self.base_capital = self.backtest_config.get('base_capital')

        self.points = int(self.payoff_config.get('points', PAYOFF_POINTS))
        self.range_pct = float(self.payoff_config.get('range_pct', PAYOFF_RANGE_PCT))

        logger.info(
            "PayoffBacktester initialized (%s, withdrawal=%.2f, investment=%.2f, losses=%s)",
            self.frequency.value, self.monthly_withdrawal, self.monthly_investment, self.apply_losses,
        )

    def resolve_base_capital(self, legs: Sequence[Leg], curve: PayoffCurve) -> float:
        """Configured base capital, or the one implied by the strategy."""
        if self.base_capital is not None:
            return float(self.base_capital)
        return derive_base_capital(calculate_strategy_cost(legs), curve.returns)

    def run(
        self,
        legs: Sequence[Leg],
        current_price: float,
        history: Sequence[HistoryPoint],
    ) -> BacktestResult:
        """Build the move curve around *current_price* and replay *history*."""
        curve = build_move_curve(legs, current_price, range_pct=self.range_pct, points=self.points)
        base_capital = self.resolve_base_capital(legs, curve)

        if base_capital <= 0:
            logger.warning("Base capital for %d legs is not positive; nothing to simulate", len(legs))

        return run_backtest(
            history,
            curve,
            base_capital,
            monthly_withdrawal=self.monthly_withdrawal,
            monthly_investment=self.monthly_investment,
            apply_losses=self.apply_losses,
            frequency=self.frequency,
        )

    def summary(self, result: BacktestResult) -> Dict:
        return result.metrics.to_dict()
