"""
Momentum oscillators: RSI, Stochastic %K and a simplified ADX.

All three are recomputed from the trailing window on every call; nothing is
smoothed incrementally. Each returns None when the series is too short.
"""
from typing import Optional

import numpy as np
import pandas as pd

from setup_screener.indicators.moving_average import sma


def rsi(closes: pd.Series, period: int = 14) -> Optional[float]:
    """
    Simple windowed RSI.

    Averages the positive and (absolute) negative close-to-close changes over
    the last ``period`` deltas. No Wilder smoothing.

    Args:
        closes: Closing prices
        period: Number of deltas in the window

    Returns:
        RSI in 0-100, 100 when there were no losses, None with fewer than
        ``period + 1`` closes
    """
    if len(closes) < period + 1:
        return None

    deltas = closes.iloc[-(period + 1):].diff().iloc[1:]
    avg_gain = float(deltas.clip(lower=0).sum()) / period
    avg_loss = float(-deltas.clip(upper=0).sum()) / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def stochastic_k(df: pd.DataFrame, k_period: int = 14) -> Optional[float]:
    """
    Stochastic %K of the latest close within the trailing ``k_period`` bars.

    Returns 50 when the window's high equals its low.
    """
    if len(df) < k_period:
        return None

    window = df.iloc[-k_period:]
    highest = float(window['High'].max())
    lowest = float(window['Low'].min())
    close = float(df['Close'].iloc[-1])

    if highest == lowest:
        return 50.0
    return (close - lowest) / (highest - lowest) * 100.0


def directional_movement(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-bar +DM / -DM.

    The larger of the up-move and down-move wins if it is positive; the other
    side is zero. The first bar has no predecessor and is dropped.
    """
    up_move = df['High'].diff()
    down_move = -df['Low'].diff()

    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)

    dm = pd.DataFrame({'PlusDM': plus_dm, 'MinusDM': minus_dm}, index=df.index)
    return dm.iloc[1:]


def adx(df: pd.DataFrame, period: int = 14) -> Optional[float]:
    """
    Simplified single-pass directional strength.

    +DI and -DI are plain SMAs of +DM / -DM over ``period`` bars and the result
    is |+DI - -DI| / (+DI + -DI) * 100. This is intentionally not the
    double-smoothed Wilder ADX; downstream thresholds (ADX > 25, ADX < 20)
    are calibrated to this formula.

    Returns:
        Value in 0-100, 0 when there was no directional movement, None with
        fewer than ``2 * period`` bars
    """
    if len(df) < period * 2:
        return None

    dm = directional_movement(df)
    plus_di = sma(dm['PlusDM'], period) or 0.0
    minus_di = sma(dm['MinusDM'], period) or 0.0

    if plus_di + minus_di == 0:
        return 0.0
    return abs(plus_di - minus_di) / (plus_di + minus_di) * 100.0
