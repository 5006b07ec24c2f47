"""
Universal data types for the payoff engine.

Legs, payoff curves and strategy statistics are immutable value objects:
built once per computation call and never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import pandas as pd

from shared.constants import DEFAULT_CONTRACT_SIZE


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Instrument(str, Enum):
    OPTION = "OPTION"
    UNDERLYING = "UNDERLYING"


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OptionType(str, Enum):
    CALL = "CALL"
    PUT = "PUT"


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Leg:
    """One position within a multi-leg strategy.

    For UNDERLYING legs ``premium`` is the entry price.  OPTION legs missing
    ``option_type`` or ``strike`` are tolerated and contribute nothing.
    """
    instrument: Instrument
    side: Side
    premium: float
    quantity: int = 1
    contract_size: float = DEFAULT_CONTRACT_SIZE
    option_type: Optional[OptionType] = None
    strike: Optional[float] = None

    @property
    def multiplier(self) -> float:
        """Contract size, falling back to the conventional 100."""
        return self.contract_size if self.contract_size and self.contract_size > 0 else DEFAULT_CONTRACT_SIZE

    @property
    def is_complete(self) -> bool:
        if self.instrument == Instrument.UNDERLYING:
            return True
        return self.option_type is not None and self.strike is not None

    @classmethod
    def option(
        cls,
        side: Side,
        option_type: OptionType,
        strike: float,
        premium: float,
        quantity: int = 1,
        contract_size: float = DEFAULT_CONTRACT_SIZE,
    ) -> "Leg":
        return cls(
            instrument=Instrument.OPTION,
            side=side,
            premium=premium,
            quantity=quantity,
            contract_size=contract_size,
            option_type=option_type,
            strike=strike,
        )

    @classmethod
    def underlying(
        cls,
        side: Side,
        entry_price: float,
        quantity: int = 1,
        contract_size: float = DEFAULT_CONTRACT_SIZE,
    ) -> "Leg":
        return cls(
            instrument=Instrument.UNDERLYING,
            side=side,
            premium=entry_price,
            quantity=quantity,
            contract_size=contract_size,
        )


@dataclass(frozen=True)
class PayoffCurve:
    """Tabulated strategy P/L over a sweep of underlying moves.

    ``variations`` are fractional moves from ``base_price`` (0.05 = +5%),
    ascending; ``returns`` is the parallel strategy P/L in currency;
    ``prices`` the parallel underlying prices.  All three are empty for a
    degenerate input (no legs, bad base price).
    """
    base_price: float
    variations: Tuple[float, ...] = ()
    returns: Tuple[float, ...] = ()
    prices: Tuple[float, ...] = ()

    def __len__(self) -> int:
        return len(self.returns)

    @property
    def is_empty(self) -> bool:
        return not self.returns

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'price': list(self.prices),
            'variation': list(self.variations),
            'profit': list(self.returns),
        })


@dataclass(frozen=True)
class PayoffBound:
    """Max profit or max loss: a finite amount, or unbounded.

    Tagged explicitly rather than mixing floats and strings.
    """
    value: float = 0.0
    unlimited: bool = False

    @classmethod
    def limited(cls, value: float) -> "PayoffBound":
        return cls(value=value, unlimited=False)

    @classmethod
    def unbounded(cls) -> "PayoffBound":
        return cls(value=0.0, unlimited=True)

    def as_number(self) -> Optional[float]:
        """The finite amount, or None when unlimited."""
        return None if self.unlimited else self.value

    def __str__(self) -> str:
        return "Unlimited" if self.unlimited else f"{self.value:,.2f}"


@dataclass(frozen=True)
class StrategyStats:
    """Risk summary derived from a payoff curve.

    ``break_evens`` are percentage moves from the current price (5.0 = +5%),
    ascending and deduplicated; ``break_even_prices`` are the matching
    underlying prices.  ``max_loss`` is reported as a positive amount and
    ``max_loss_pct`` as a negative percentage.
    """
    max_profit: PayoffBound = field(default_factory=PayoffBound)
    max_loss: PayoffBound = field(default_factory=PayoffBound)
    break_evens: Tuple[float, ...] = ()
    break_even_prices: Tuple[float, ...] = ()
    net_premium: float = 0.0
    capital_at_risk: Optional[float] = None
    max_profit_pct: Optional[float] = None
    max_loss_pct: Optional[float] = None
    spot_pnl: float = 0.0
