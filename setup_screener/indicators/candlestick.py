"""
Single-candle and two-candle reversal pattern detection.

Exactly one label is returned per candle. When a candle satisfies several
definitions the first match in this order wins:

1. doji / gravestone_doji  (body < 10% of ATR, non-zero range)
2. hammer                  (bullish, lower shadow >= 2x body, upper shadow < 0.5x body)
3. long_lower_shadow       (lower shadow > 60% of range)
4. shooting_star           (bearish, upper shadow >= 2x body, lower shadow < 0.5x body)
5. engulfing_bullish       (bullish body engulfs a bearish previous body)
6. engulfing_bearish       (bearish body engulfs a bullish previous body)

So a doji with a long lower shadow is reported as "doji", never as
"long_lower_shadow".
"""
from typing import Optional

import pandas as pd

from setup_screener.config import CandlestickPattern

BULLISH_PATTERNS = ("doji", "hammer", "long_lower_shadow", "engulfing_bullish")
BEARISH_PATTERNS = ("gravestone_doji", "shooting_star", "engulfing_bearish")


def detect_candlestick_pattern(df: pd.DataFrame, atr_value: Optional[float]) -> CandlestickPattern:
    """
    Classify the latest candle.

    Args:
        df: OHLC DataFrame (only the last two rows are used)
        atr_value: Current ATR, used to size the doji body threshold

    Returns:
        Pattern label, "none" when nothing matches, with fewer than two bars
        or without an ATR
    """
    if len(df) < 2 or not atr_value:
        return "none"

    current = df.iloc[-1]
    previous = df.iloc[-2]

    open_, high, low, close = (float(current[c]) for c in ('Open', 'High', 'Low', 'Close'))
    prev_open, prev_close = float(previous['Open']), float(previous['Close'])

    body = abs(close - open_)
    candle_range = high - low
    upper_shadow = high - max(open_, close)
    lower_shadow = min(open_, close) - low
    is_bullish = close > open_

    if body < atr_value * 0.1 and candle_range > 0:
        if upper_shadow >= body * 2 and lower_shadow < body * 0.5:
            return "gravestone_doji"
        return "doji"

    if lower_shadow >= body * 2 and upper_shadow < body * 0.5 and is_bullish:
        return "hammer"

    if candle_range > 0 and lower_shadow > candle_range * 0.6:
        return "long_lower_shadow"

    if upper_shadow >= body * 2 and lower_shadow < body * 0.5 and not is_bullish:
        return "shooting_star"

    prev_body = abs(prev_close - prev_open)
    prev_is_bullish = prev_close > prev_open

    if is_bullish and not prev_is_bullish and body > prev_body \
            and open_ <= prev_close and close >= prev_open:
        return "engulfing_bullish"

    if not is_bullish and prev_is_bullish and body > prev_body \
            and open_ >= prev_close and close <= prev_open:
        return "engulfing_bearish"

    return "none"
