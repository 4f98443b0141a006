"""
Fibonacci retracement / extension zone hit-testing.

The swing range is taken from the highest high and lowest low of the trailing
window. Retracements are measured from the low (38.2%, 50%, 61.8%) and
extensions project beyond the high (127%, 161.8%). For a
"swing_high_to_low" reference the two anchors are swapped, so levels are
measured downward from the high.
"""
from dataclasses import dataclass, field
from typing import Dict

import pandas as pd

from setup_screener.config import FibReference, FibZone

ZONE_TOLERANCE = 0.01  # fraction of the swing range


@dataclass
class FibonacciResult:
    """Outcome of a zone hit-test."""
    hit: bool = False
    bullish_reaction: bool = False
    levels: Dict[str, float] = field(default_factory=dict)


def fibonacci_levels(swing_high: float, swing_low: float) -> Dict[str, float]:
    """Retracement and extension levels for a swing (anchors may be swapped)."""
    swing_range = swing_high - swing_low
    return {
        '38.2': swing_low + swing_range * 0.382,
        '50': swing_low + swing_range * 0.5,
        '61.8': swing_low + swing_range * 0.618,
        '127': swing_high + swing_range * 0.27,
        '161.8': swing_high + swing_range * 0.618,
    }


def _between(price: float, a: float, b: float, tolerance: float) -> bool:
    return min(a, b) - tolerance <= price <= max(a, b) + tolerance


def analyze_fibonacci(
    df: pd.DataFrame,
    reference: FibReference,
    zone: FibZone,
    window: int = 50
) -> FibonacciResult:
    """
    Test whether the latest close sits in the requested Fibonacci zone.

    Args:
        df: OHLC DataFrame
        reference: "swing_low_to_high" or "swing_high_to_low"
        zone: Zone to test, or "*" for any level
        window: Number of trailing bars defining the swing

    Returns:
        FibonacciResult with the hit flag, a bullish-reaction flag (hit and
        latest close above the previous close) and the computed levels
    """
    if len(df) < window:
        return FibonacciResult()

    recent = df.iloc[-window:]
    swing_high = float(recent['High'].max())
    swing_low = float(recent['Low'].min())
    if reference == "swing_high_to_low":
        swing_high, swing_low = swing_low, swing_high

    levels = fibonacci_levels(swing_high, swing_low)
    tolerance = abs(swing_high - swing_low) * ZONE_TOLERANCE
    price = float(df['Close'].iloc[-1])

    if zone == "38.2-50":
        hit = _between(price, levels['38.2'], levels['50'], tolerance)
    elif zone == "50-61.8":
        hit = _between(price, levels['50'], levels['61.8'], tolerance)
    elif zone == "38.2-61.8":
        hit = _between(price, levels['38.2'], levels['61.8'], tolerance)
    elif zone == "extension-127":
        hit = abs(price - levels['127']) <= tolerance
    elif zone == "extension-161.8":
        hit = abs(price - levels['161.8']) <= tolerance
    else:
        hit = True  # "*" accepts any level

    bullish_reaction = hit and len(df) >= 2 and price > float(df['Close'].iloc[-2])

    return FibonacciResult(hit=hit, bullish_reaction=bullish_reaction, levels=levels)
