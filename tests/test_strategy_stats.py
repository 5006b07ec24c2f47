"""Tests for the strategy statistics engine."""
import pytest

from strategies.base import Leg, OptionType, PayoffBound, PayoffCurve, Side, StrategyStats
from strategies.payoff import build_price_curve, calculate_leg_payoff
from strategies.stats import calculate_strategy_stats, detect_bounds, find_break_evens


def _stats(legs, price):
    return calculate_strategy_stats(legs, build_price_curve(legs, price), price)


# ---------------------------------------------------------------------------
# Bear call spread
# ---------------------------------------------------------------------------

class TestBearCallSpread:

    def setup_method(self):
        self.legs = [
            Leg.option(Side.SELL, OptionType.CALL, strike=30, premium=1.50),
            Leg.option(Side.BUY, OptionType.CALL, strike=32, premium=0.50),
        ]
        self.stats = _stats(self.legs, 30)

    def test_net_premium_is_credit(self):
        assert self.stats.net_premium == pytest.approx(100)

    def test_max_profit_and_loss_are_capped(self):
        assert not self.stats.max_profit.unlimited
        assert not self.stats.max_loss.unlimited
        assert self.stats.max_profit.value == pytest.approx(100)
        assert self.stats.max_loss.value == pytest.approx(100)

    def test_single_break_even_near_31(self):
        assert len(self.stats.break_evens) == 1
        assert self.stats.break_evens[0] == pytest.approx(100 / 30, abs=0.01)
        assert self.stats.break_even_prices[0] == pytest.approx(31, abs=0.01)

    def test_capital_at_risk_is_max_loss_for_credit(self):
        assert self.stats.capital_at_risk == pytest.approx(100)
        assert self.stats.max_profit_pct == pytest.approx(100)
        assert self.stats.max_loss_pct == pytest.approx(-100)

    def test_spot_pnl(self):
        assert self.stats.spot_pnl == pytest.approx(100)


# ---------------------------------------------------------------------------
# Unbounded strategies
# ---------------------------------------------------------------------------

class TestUnlimited:

    def test_long_call_profit_unlimited(self):
        legs = [Leg.option(Side.BUY, OptionType.CALL, strike=100, premium=5, quantity=10)]
        stats = _stats(legs, 100)
        assert stats.max_profit.unlimited
        assert stats.max_profit.as_number() is None
        assert str(stats.max_profit) == "Unlimited"
        assert stats.max_loss.value == pytest.approx(5000)

    def test_long_call_debit_sets_capital_at_risk(self):
        legs = [Leg.option(Side.BUY, OptionType.CALL, strike=100, premium=5, quantity=10)]
        stats = _stats(legs, 100)
        assert stats.net_premium == pytest.approx(-5000)
        assert stats.capital_at_risk == pytest.approx(5000)
        assert stats.max_profit_pct is None
        assert stats.max_loss_pct == pytest.approx(-100)

    def test_short_call_loss_unlimited(self):
        legs = [Leg.option(Side.SELL, OptionType.CALL, strike=100, premium=5, quantity=10)]
        stats = _stats(legs, 100)
        assert stats.max_loss.unlimited
        assert stats.max_profit.value == pytest.approx(5000)
        assert stats.capital_at_risk is None
        assert stats.max_profit_pct is None
        assert stats.max_loss_pct is None

    def test_small_position_below_threshold_is_reported_finite(self):
        # Edge-slope heuristic: the sampled edge must exceed the threshold.
        legs = [Leg.option(Side.BUY, OptionType.CALL, strike=100, premium=5)]
        stats = _stats(legs, 100)
        assert not stats.max_profit.unlimited
        assert stats.max_profit.value == pytest.approx(1500)

    def test_left_edge_loss(self):
        max_profit, max_loss = detect_bounds([-20000, -15000, 0, 10])
        assert max_loss.unlimited
        assert max_profit == PayoffBound.limited(10)

    def test_single_point_curve(self):
        max_profit, max_loss = detect_bounds([50])
        assert max_profit.value == 50
        assert max_loss.value == 50


# ---------------------------------------------------------------------------
# Break-evens
# ---------------------------------------------------------------------------

class TestBreakEvens:

    def test_interpolates_crossing(self):
        assert find_break_evens([0.0, 0.1], [-10, 30]) == [2.5]

    def test_exact_zero_sample(self):
        assert find_break_evens([-0.1, 0.0, 0.1], [-10, 0, 10]) == [0.0]

    def test_two_crossings_sorted(self):
        assert find_break_evens([-0.1, 0.0, 0.1], [10, -10, 10]) == [-5.0, 5.0]

    def test_no_crossing(self):
        assert find_break_evens([-0.1, 0.0, 0.1], [1, 2, 3]) == []

    def test_deduplicates_after_rounding(self):
        assert find_break_evens([0.0, 0.1, 0.0, 0.1], [-1, 1, -1, 1]) == [5.0]

    def test_idempotent(self, bear_call_legs):
        curve = build_price_curve(bear_call_legs, 30)
        first = find_break_evens(curve.variations, curve.returns)
        second = find_break_evens(curve.variations, curve.returns)
        assert first == second

    def test_long_straddle_has_two(self):
        legs = [
            Leg.option(Side.BUY, OptionType.CALL, strike=100, premium=5),
            Leg.option(Side.BUY, OptionType.PUT, strike=100, premium=5),
        ]
        stats = _stats(legs, 100)
        assert stats.break_even_prices == pytest.approx((90, 110), abs=0.01)


# ---------------------------------------------------------------------------
# Degenerate input
# ---------------------------------------------------------------------------

class TestEmpty:

    def test_empty_curve_gives_zero_stats(self, bear_call_legs):
        stats = calculate_strategy_stats(bear_call_legs, PayoffCurve(base_price=30), 30)
        assert stats == StrategyStats()
        assert stats.max_profit.value == 0
        assert stats.capital_at_risk is None
        assert stats.break_evens == ()

    def test_no_legs(self):
        stats = _stats([], 30)
        assert stats.net_premium == 0
        assert stats.spot_pnl == 0

    def test_spot_pnl_uses_current_price_directly(self, bear_call_legs):
        price = 30.7
        stats = _stats(bear_call_legs, price)
        direct = sum(calculate_leg_payoff(leg, price) for leg in bear_call_legs)
        assert stats.spot_pnl == direct
