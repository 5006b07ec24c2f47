"""Shared constants used across the payoff and backtest engine.

This is the single canonical location for all named constants.  Do NOT
create secondary ``constants.py`` files elsewhere in the tree.
"""

import os

# ---------------------------------------------------------------------------
# Standardized project paths
# ---------------------------------------------------------------------------
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.path.join(PROJECT_ROOT, 'config.yaml')

# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------
DEFAULT_CONTRACT_SIZE = 100

# ---------------------------------------------------------------------------
# Payoff curves
# ---------------------------------------------------------------------------
PAYOFF_POINTS = 320              # sampled intervals -> 321 points
PAYOFF_RANGE_PCT = 0.40          # percentage sweep half-width (+/-40%)
STRIKE_BUFFER_FRACTION = 0.5     # absolute sweep buffer: 50% of strike range
FLAT_BUFFER_FRACTION = 0.2       # ... or 20% of max strike when range is zero
PRICE_DECIMALS = 4
PROFIT_DECIMALS = 4
VARIATION_DECIMALS = 6
BREAK_EVEN_DECIMALS = 4

# Edge-slope heuristic: a curve edge beyond this P/L with an outward slope is
# reported as unbounded.
UNLIMITED_THRESHOLD = 10_000

# ---------------------------------------------------------------------------
# Backtesting
# ---------------------------------------------------------------------------
WEEKS_PER_MONTH = 4.33
DAYS_PER_MONTH = 30.44

# Synthetic loss schedule. Pending product-owner confirmation; do not assume
# these generalize beyond the dashboard's stress test.
LOSS_SMALL_EVERY_MONTHS = 6
LOSS_SMALL_PCT = 0.02
LOSS_LARGE_EVERY_MONTHS = 10
LOSS_LARGE_PCT = 0.09
LOSS_MAX_PCT = 0.99

ANCHOR_BUBBLE_SIZE = 4
MAX_BUBBLE_SIZE = 16
BUBBLE_SCALE = 0.6

# ---------------------------------------------------------------------------
# IRR solver
# ---------------------------------------------------------------------------
IRR_INITIAL_GUESS = 0.1
IRR_NEWTON_ITERATIONS = 60
IRR_BISECTION_ITERATIONS = 120
IRR_LOWER_BOUND = -0.999
IRR_UPPER_BOUND = 10.0
IRR_TOLERANCE = 1e-7
