"""
Historical price series adapters.

The engine consumes ``HistoryPoint`` sequences; these helpers derive them
from raw ``(time, close)`` samples or from a pandas OHLCV frame as returned
by the market-data collaborator.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from shared.exceptions import HistoryDataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryPoint:
    """One historical sample.

    ``return_pct`` is the fractional change from the previous close; None
    for the first sample of a series.
    """
    time: datetime
    close: float
    return_pct: Optional[float] = None


def compute_history_returns(samples: Iterable[Tuple[datetime, float]]) -> List[HistoryPoint]:
    """Build HistoryPoints from ``(time, close)`` samples.

    Samples with a missing or non-finite close are dropped, the rest sorted
    ascending by time, and each point's return is measured against the
    previous kept close.  A point following a zero close has no return.
    """
    clean = [
        (time, float(close))
        for time, close in samples
        if close is not None and math.isfinite(close)
    ]
    clean.sort(key=lambda s: s[0])

    points = []
    last_close = None
    for time, close in clean:
        if last_close is None or last_close == 0:
            return_pct = None
        else:
            return_pct = close / last_close - 1
        last_close = close
        points.append(HistoryPoint(time=time, close=close, return_pct=return_pct))
    return points


def history_from_frame(df: pd.DataFrame, column: str = 'Close') -> List[HistoryPoint]:
    """Adapt a DatetimeIndex price frame into HistoryPoints.

    Raises:
        HistoryDataError: if *column* is missing or the index is not
            datetime-like.
    """
    if column not in df.columns:
        raise HistoryDataError(f"Price frame has no '{column}' column")

    try:
        index = pd.to_datetime(df.index)
    except (TypeError, ValueError) as e:
        raise HistoryDataError(f"Price frame index is not datetime-like: {e}")

    closes = pd.to_numeric(df[column], errors='coerce')
    samples = [
        (ts.to_pydatetime(), None if pd.isna(close) else float(close))
        for ts, close in zip(index, closes)
    ]
    points = compute_history_returns(samples)
    logger.debug("Adapted %d of %d price rows into history points", len(points), len(df))
    return points
