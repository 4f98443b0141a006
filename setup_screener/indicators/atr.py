"""
Average True Range (ATR).

ATR here is the simple moving average of the True Range over the most
recent ``period`` bars (not Wilder-smoothed). The doji test in the candlestick
module sizes its body threshold from it.
"""
from typing import Optional

import pandas as pd

from setup_screener.indicators.moving_average import sma


def compute_true_range(df: pd.DataFrame) -> pd.Series:
    """
    Per-bar True Range: the widest of High-Low, |High-PrevClose| and
    |Low-PrevClose|.

    The first bar has no previous close, so only High - Low applies to it.
    """
    prev_close = df['Close'].shift(1)
    ranges = pd.DataFrame({
        'HighLow': df['High'] - df['Low'],
        'HighPrevClose': (df['High'] - prev_close).abs(),
        'LowPrevClose': (df['Low'] - prev_close).abs(),
    })
    true_range = ranges.max(axis=1)
    true_range.name = 'TrueRange'
    return true_range


def compute_atr_series(df: pd.DataFrame, period: int = 14) -> pd.Series:
    """
    Rolling SMA of True Range, one value per bar.

    The first bar is excluded from the window because it has no previous close.
    """
    true_range = compute_true_range(df).iloc[1:]
    atr_series = true_range.rolling(window=period).mean()
    atr_series.name = f'ATR_{period}_sma'
    return atr_series


def atr(df: pd.DataFrame, period: int = 14) -> Optional[float]:
    """
    Current ATR value.

    Args:
        df: DataFrame with 'High', 'Low', 'Close' columns
        period: Number of true-range values to average

    Returns:
        ATR of the most recent ``period`` bars, or None with fewer than
        ``period + 1`` bars
    """
    if len(df) < period + 1:
        return None
    return sma(compute_true_range(df).iloc[1:], period)
