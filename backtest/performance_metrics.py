"""
Performance Metrics
Format and display backtest performance statistics.
"""

import logging
from typing import Dict, Optional

from backtest.backtester import BacktestResult
from strategies.base import StrategyStats

logger = logging.getLogger(__name__)


class PerformanceMetrics:
    """
    Render backtest results and strategy statistics as text.
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize performance metrics formatter.

        Args:
            config: Configuration dictionary (the ``backtest`` section is
                    echoed in the report header)
        """
        self.config = config or {}

    def generate_report(self, result: BacktestResult, stats: Optional[StrategyStats] = None) -> str:
        """
        Generate a formatted performance report.

        Args:
            result: Result from run_backtest / PayoffBacktester.run
            stats: Optional strategy statistics to include

        Returns:
            Report text (empty string when the run produced no rows)
        """
        if not result.rows:
            logger.warning("No backtest results to report")
            return ""

        m = result.metrics
        bt = self.config.get('backtest', {})
        lines = []
        lines.append("=" * 80)
        lines.append("OPTIONS STRATEGY - PAYOFF BACKTEST REPORT")
        lines.append("=" * 80)
        lines.append("")

        lines.append("PERIOD")
        lines.append("-" * 80)
        lines.append(f"From: {result.rows[0].time:%Y-%m-%d}  To: {result.rows[-1].time:%Y-%m-%d}")
        lines.append(f"Periods: {len(result.rows)}")
        if bt:
            lines.append(f"Frequency: {bt.get('frequency', 'MONTHLY')}")
            lines.append(f"Synthetic Losses: {'on' if bt.get('apply_losses') else 'off'}")
        lines.append(f"Loss Events: {sum(1 for r in result.rows if r.loss_event)}")
        lines.append("")

        if stats is not None:
            lines.append("STRATEGY")
            lines.append("-" * 80)
            lines.append(f"Net Premium: ${stats.net_premium:,.2f}")
            lines.append(f"Max Profit: {stats.max_profit}")
            lines.append(f"Max Loss: {stats.max_loss}")
            if stats.break_evens:
                moves = ", ".join(f"{be:+.2f}%" for be in stats.break_evens)
                lines.append(f"Break-evens: {moves}")
            lines.append("")

        lines.append("RETURNS (REINVESTED)")
        lines.append("-" * 80)
        lines.append(f"Starting Capital: ${m.initial_capital:,.2f}")
        lines.append(f"Ending Capital: ${m.final_capital_no_withdrawal:,.2f}")
        lines.append(f"Return: {m.total_profit_pct:.2f}%")
        lines.append(f"Average Monthly Profit: ${m.avg_monthly_profit:,.2f}")
        lines.append(f"Monthly Equivalent Rate: {m.monthly_equivalent_rate:.2f}%")
        lines.append("")

        lines.append("RETURNS (WITH WITHDRAWALS)")
        lines.append("-" * 80)
        lines.append(f"Ending Capital: ${m.final_capital_with_withdrawal:,.2f}")
        lines.append(f"Return: {m.profit_with_withdrawal_pct:.2f}%")
        lines.append(f"Monthly Rate: {m.monthly_rate_with_withdrawal:.2f}%")
        lines.append(f"Monthly IRR: {m.monthly_irr:.2f}%")
        lines.append("")

        lines.append("PERIOD STATISTICS")
        lines.append("-" * 80)
        total = m.wins + m.losses
        win_rate = m.wins / total * 100 if total else 0.0
        lines.append(f"Winning Periods: {m.wins}")
        lines.append(f"Losing Periods: {m.losses}")
        lines.append(f"Win Rate: {win_rate:.2f}%")
        lines.append("")
        lines.append("=" * 80)

        return "\n".join(lines)

    def log_summary(self, result: BacktestResult):
        """
        Log a one-line summary.
        """
        m = result.metrics
        logger.info(
            "Backtest: %d periods | return %.2f%% | with withdrawals %.2f%% | monthly IRR %.2f%% | %d W / %d L",
            len(result.rows), m.total_profit_pct, m.profit_with_withdrawal_pct,
            m.monthly_irr, m.wins, m.losses,
        )
