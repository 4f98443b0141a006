"""
Bollinger Bands.

Middle band is the SMA of the window; the outer bands sit a multiple of the
population standard deviation (ddof=0) above and below it.
"""
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from setup_screener.indicators.moving_average import sma


@dataclass
class BollingerBands:
    """Band levels for the latest bar."""
    upper: float
    middle: float
    lower: float
    percent_b: Optional[float] = None  # 0 at the lower band, 1 at the upper band

    @property
    def width(self) -> float:
        """Band width as a fraction of the middle band (0 if middle is 0)."""
        if not self.middle:
            return 0.0
        return (self.upper - self.lower) / self.middle


def bollinger_bands(
    closes: pd.Series,
    period: int = 20,
    std_multiplier: float = 2.0
) -> Optional[BollingerBands]:
    """
    Compute Bollinger Bands for the latest close.

    Returns None with fewer than ``period`` closes.
    """
    middle = sma(closes, period)
    if middle is None:
        return None

    std = float(closes.iloc[-period:].std(ddof=0))
    return BollingerBands(
        upper=middle + std * std_multiplier,
        middle=middle,
        lower=middle - std * std_multiplier,
    )


def bollinger_bands_extended(
    closes: pd.Series,
    period: int = 20,
    std_multiplier: float = 2.0
) -> Optional[BollingerBands]:
    """
    Bollinger Bands plus %B of the latest close.

    %B = (close - lower) / (upper - lower), or 0.5 when the bands coincide.
    """
    bands = bollinger_bands(closes, period, std_multiplier)
    if bands is None:
        return None

    close = float(closes.iloc[-1])
    if bands.upper != bands.lower:
        bands.percent_b = (close - bands.lower) / (bands.upper - bands.lower)
    else:
        bands.percent_b = 0.5
    return bands
