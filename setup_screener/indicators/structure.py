"""
Price structure: support/resistance distance, Fair Value Gaps, swing points,
entry confirmation and the earnings-proximity check.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Literal, Optional, Tuple

import numpy as np
import pandas as pd

from setup_screener.data.models import TickerMeta, bar_date


@dataclass
class FVGZone:
    """A three-candle Fair Value Gap."""
    type: Literal["bullish", "bearish"]
    top_price: float
    bottom_price: float
    midpoint: float     # 50% retracement target
    start_date: str
    end_date: str
    is_filled: bool     # latest close is back inside the gap


@dataclass
class SwingPoint:
    """A local extreme that strictly beats ``strength`` bars on each side."""
    date: str
    price: float
    type: Literal["high", "low"]
    strength: int


def support_resistance_distance(df: pd.DataFrame, window: int = 20) -> Optional[float]:
    """
    Percent distance from the latest close to the nearer of the window's
    highest high (resistance) and lowest low (support).
    """
    if len(df) < window:
        return None

    price = float(df['Close'].iloc[-1])
    if price == 0:
        return None
    recent = df.iloc[-window:]
    resistance = float(recent['High'].max())
    support = float(recent['Low'].min())

    to_resistance = abs(price - resistance) / price * 100
    to_support = abs(price - support) / price * 100
    return min(to_resistance, to_support)


def detect_fvgs(df: pd.DataFrame, lookback: int = 20) -> List[FVGZone]:
    """
    Scan the last ``lookback + 2`` bars for Fair Value Gaps.

    Bullish gap: candle[i].low > candle[i-2].high.
    Bearish gap: candle[i].high < candle[i-2].low.
    """
    if len(df) < lookback + 2:
        return []

    recent = df.iloc[-(lookback + 2):]
    highs = recent['High'].to_numpy(dtype=float)
    lows = recent['Low'].to_numpy(dtype=float)
    price = float(df['Close'].iloc[-1])

    zones: List[FVGZone] = []
    for i in range(2, len(recent)):
        start, end = bar_date(recent, i - 2), bar_date(recent, i)

        if lows[i] > highs[i - 2]:
            top, bottom = lows[i], highs[i - 2]
            zones.append(FVGZone(
                type="bullish",
                top_price=top,
                bottom_price=bottom,
                midpoint=(top + bottom) / 2,
                start_date=start,
                end_date=end,
                is_filled=bottom <= price <= top
            ))

        if highs[i] < lows[i - 2]:
            top, bottom = lows[i - 2], highs[i]
            zones.append(FVGZone(
                type="bearish",
                top_price=top,
                bottom_price=bottom,
                midpoint=(top + bottom) / 2,
                start_date=start,
                end_date=end,
                is_filled=bottom <= price <= top
            ))

    return zones


def detect_swing_points(df: pd.DataFrame, strength: int = 3) -> Tuple[List[SwingPoint], List[SwingPoint]]:
    """
    Find swing highs and lows.

    A bar is a swing high only if its high is strictly greater than the highs
    of the ``strength`` bars before and after it (and symmetrically for lows).

    Returns:
        Tuple of (swing_highs, swing_lows) in chronological order
    """
    highs: List[SwingPoint] = []
    lows: List[SwingPoint] = []
    if len(df) < strength * 2 + 1:
        return highs, lows

    high = df['High'].to_numpy(dtype=float)
    low = df['Low'].to_numpy(dtype=float)

    for i in range(strength, len(df) - strength):
        neighbours = np.r_[i - strength:i, i + 1:i + strength + 1]
        if (high[neighbours] < high[i]).all():
            highs.append(SwingPoint(date=bar_date(df, i), price=float(high[i]), type="high", strength=strength))
        if (low[neighbours] > low[i]).all():
            lows.append(SwingPoint(date=bar_date(df, i), price=float(low[i]), type="low", strength=strength))

    return highs, lows


def check_entry_confirmation(df: pd.DataFrame) -> bool:
    """True when the latest close breaks above the previous bar's high."""
    if len(df) < 2:
        return False
    return float(df['Close'].iloc[-1]) > float(df['High'].iloc[-2])


def check_earnings_warning(meta: TickerMeta, warning_days: int, as_of: date) -> bool:
    """
    True when the next earnings date falls within [as_of, as_of + warning_days].

    Missing or unparseable earnings dates never warn.
    """
    if not meta.next_earnings_date:
        return False
    try:
        earnings = date.fromisoformat(meta.next_earnings_date[:10])
    except ValueError:
        return False

    days_until = (earnings - as_of).days
    return 0 <= days_until <= warning_days
