"""Custom exception hierarchy for the payoff and backtest engine."""


class PayoffEngineError(Exception):
    """Base exception for all engine errors."""


class ConfigError(PayoffEngineError, ValueError):
    """Raised on configuration errors."""


class HistoryDataError(PayoffEngineError):
    """Raised when a historical price frame cannot be adapted."""
