"""
Backtesting module for option strategy payoffs.
"""

from .backtester import (
    BacktestFrequency, BacktestMetrics, BacktestResult, BacktestRow,
    PayoffBacktester, run_backtest,
)
from .history import HistoryPoint, compute_history_returns, history_from_frame
from .irr import calculate_irr
from .performance_metrics import PerformanceMetrics

__all__ = [
    'BacktestFrequency', 'BacktestMetrics', 'BacktestResult', 'BacktestRow',
    'PayoffBacktester', 'run_backtest',
    'HistoryPoint', 'compute_history_returns', 'history_from_frame',
    'calculate_irr',
    'PerformanceMetrics',
]
