"""
Moving averages and trend direction.
"""
from typing import Optional, Sequence, Union

import pandas as pd

from setup_screener.config import Trend

Values = Union[pd.Series, Sequence[float]]


def sma(values: Values, period: int) -> Optional[float]:
    """
    Arithmetic mean of the last ``period`` values.

    Returns None when fewer than ``period`` values are available.
    """
    series = values if isinstance(values, pd.Series) else pd.Series(values, dtype=float)
    if period <= 0 or len(series) < period:
        return None
    return float(series.iloc[-period:].mean())


def determine_trend(closes: pd.Series, lookback: int) -> Trend:
    """
    Classify trend direction from the close-to-close change over ``lookback`` bars.

    More than +5% is "up", less than -5% is "down", anything else (including
    too little history) is "sideways".
    """
    if len(closes) < lookback:
        return "sideways"

    window = closes.iloc[-lookback:]
    first_close = float(window.iloc[0])
    last_close = float(window.iloc[-1])
    if first_close == 0:
        return "sideways"

    change = (last_close - first_close) / first_close
    if change > 0.05:
        return "up"
    if change < -0.05:
        return "down"
    return "sideways"
