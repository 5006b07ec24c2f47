"""Shared test fixtures."""
import numpy as np
import pandas as pd
import pytest

from strategies.base import Leg, OptionType, Side


@pytest.fixture
def sample_config():
    return {
        'payoff': {
            'points': 320,
            'range_pct': 0.40,
        },
        'backtest': {
            'frequency': 'MONTHLY',
            'monthly_withdrawal': 0,
            'monthly_investment': 0,
            'apply_losses': False,
        },
        'logging': {'level': 'WARNING', 'file': '/tmp/test_payoff_engine.log', 'console': False},
    }


@pytest.fixture
def bear_call_legs():
    """SELL 30 call @1.50 / BUY 32 call @0.50, one contract of 100."""
    return [
        Leg.option(Side.SELL, OptionType.CALL, strike=30, premium=1.50),
        Leg.option(Side.BUY, OptionType.CALL, strike=32, premium=0.50),
    ]


@pytest.fixture
def long_stock_leg():
    """One share bought at 100: P/L equals the price move."""
    return [Leg.underlying(Side.BUY, entry_price=100, quantity=1, contract_size=1)]


@pytest.fixture
def sample_price_frame():
    """Synthetic weekly OHLC frame as a market-data provider returns it."""
    np.random.seed(42)
    dates = pd.date_range('2023-01-06', periods=60, freq='W-FRI')
    close = 100 + np.cumsum(np.random.randn(60))
    return pd.DataFrame({
        'Open': close - np.random.rand(60),
        'High': close + np.abs(np.random.randn(60)),
        'Low': close - np.abs(np.random.randn(60)),
        'Close': close,
    }, index=dates)
