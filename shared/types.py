"""TypedDict definitions for configuration and serialized result shapes."""

from typing import TypedDict


class PayoffConfig(TypedDict, total=False):
    """Payoff curve sampling configuration."""
    points: int
    range_pct: float


class BacktestConfig(TypedDict, total=False):
    """Backtest simulation configuration."""
    frequency: str
    monthly_withdrawal: float
    monthly_investment: float
    apply_losses: bool
    base_capital: float


class LoggingConfig(TypedDict, total=False):
    """Logging configuration."""
    level: str
    file: str
    console: bool


class AppConfig(TypedDict, total=False):
    """Top-level application configuration."""
    payoff: PayoffConfig
    backtest: BacktestConfig
    logging: LoggingConfig


class MetricsDict(TypedDict):
    """Return type of BacktestMetrics.to_dict."""
    initial_capital: float
    final_capital_no_withdrawal: float
    final_capital_with_withdrawal: float
    total_profit_pct: float
    avg_monthly_profit: float
    monthly_equivalent_rate: float
    profit_with_withdrawal_pct: float
    monthly_rate_with_withdrawal: float
    monthly_irr: float
    wins: int
    losses: int
