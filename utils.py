"""
Utility functions for the payoff engine: config loading and logging.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Dict
import yaml
import colorlog

from shared.exceptions import ConfigError
from shared.types import AppConfig

_FREQUENCIES = ('WEEKLY', 'MONTHLY')
_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _resolve_env_vars(obj):
    """Recursively resolve ${ENV_VAR} references in config values."""
    import os
    import re
    if isinstance(obj, str):
        def replacer(m):
            return os.environ.get(m.group(1), m.group(0))
        return re.sub(r'\$\{(\w+)\}', replacer, obj)
    elif isinstance(obj, dict):
        return {k: _resolve_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_resolve_env_vars(i) for i in obj]
    return obj


def load_config(config_file: str = 'config.yaml') -> Dict:
    """
    Load configuration from YAML file.
    Supports ${ENV_VAR} substitution in string values.

    Args:
        config_file: Path to config file

    Returns:
        Configuration dictionary
    """
    from dotenv import load_dotenv
    load_dotenv()

    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    return _resolve_env_vars(config or {})


def setup_logging(config: Dict):
    """
    Setup logging configuration.

    Args:
        config: Configuration dictionary
    """
    log_config = config['logging']

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_formatter = colorlog.ColoredFormatter(
        '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s%(reset)s',
        datefmt='%H:%M:%S',
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        }
    )

    handlers = []

    # File handler (rotating)
    if log_config.get('file'):
        log_file = Path(log_config['file'])
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10 MB
            backupCount=5
        )
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    if log_config.get('console', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    log_level = getattr(logging, log_config.get('level', 'INFO'))

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True,
    )


def validate_config(config: AppConfig) -> None:
    """
    Validate configuration.  Raises ``ConfigError`` (a ``ValueError``) on
    invalid input.

    Args:
        config: Configuration dictionary
    """
    required_sections = ['payoff', 'backtest', 'logging']

    for section in required_sections:
        if section not in config:
            raise ConfigError(f"Missing required config section: {section}")

    payoff = config['payoff']
    points = payoff.get('points', 320)
    if not isinstance(points, int) or points <= 0:
        raise ConfigError("payoff.points must be a positive integer")

    range_pct = payoff.get('range_pct', 0.40)
    if not 0 < range_pct < 1:
        raise ConfigError("payoff.range_pct must be between 0 and 1")

    backtest = config['backtest']
    frequency = str(backtest.get('frequency', 'MONTHLY')).upper()
    if frequency not in _FREQUENCIES:
        raise ConfigError(f"backtest.frequency must be one of {_FREQUENCIES}, got {frequency}")

    for key in ('monthly_withdrawal', 'monthly_investment'):
        if backtest.get(key, 0) < 0:
            raise ConfigError(f"backtest.{key} must not be negative")

    base_capital = backtest.get('base_capital')
    if base_capital is not None and base_capital <= 0:
        raise ConfigError("backtest.base_capital must be positive when set")

    level = config['logging'].get('level', 'INFO')
    if level not in _LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {_LOG_LEVELS}")
