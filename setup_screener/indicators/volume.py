"""
Volume indicators: relative volume and buyer/seller volume shift.
"""
from dataclasses import dataclass
from typing import Literal, Optional

import numpy as np
import pandas as pd

from setup_screener.indicators.moving_average import sma

VolumeShift = Literal["buyer", "seller", "neutral"]


@dataclass
class VolumeAnalysis:
    """Buyer vs seller dominance over a short lookback."""
    shift: VolumeShift
    strength: float  # 0-100
    buyer_volume: float
    seller_volume: float


def relative_volume(df: pd.DataFrame, window: int = 20) -> Optional[float]:
    """Latest volume divided by its trailing ``window``-bar average."""
    avg = sma(df['Volume'], window)
    if not avg:
        return None
    return float(df['Volume'].iloc[-1]) / avg


def analyze_volume_shift(df: pd.DataFrame, lookback: int = 5) -> VolumeAnalysis:
    """
    Split recent volume into buyer and seller volume.

    Bullish candles count as buyer volume, bearish candles as seller volume
    and unchanged candles split evenly. A buyer ratio above 0.6 is a "buyer"
    shift, below 0.4 a "seller" shift; strength grows linearly from the 0.5
    midpoint and is capped at 100.
    """
    neutral = VolumeAnalysis(shift="neutral", strength=0.0, buyer_volume=0.0, seller_volume=0.0)
    if len(df) < lookback:
        return neutral

    recent = df.iloc[-lookback:]
    opens = recent['Open'].to_numpy(dtype=float)
    closes = recent['Close'].to_numpy(dtype=float)
    volumes = recent['Volume'].to_numpy(dtype=float)

    buyer_weight = np.where(closes > opens, 1.0, np.where(closes < opens, 0.0, 0.5))
    buyer_volume = float((volumes * buyer_weight).sum())
    seller_volume = float((volumes * (1.0 - buyer_weight)).sum())

    total = buyer_volume + seller_volume
    if total == 0:
        return neutral

    buyer_ratio = buyer_volume / total
    if buyer_ratio > 0.6:
        shift, strength = "buyer", min((buyer_ratio - 0.5) * 200, 100.0)
    elif buyer_ratio < 0.4:
        shift, strength = "seller", min((0.5 - buyer_ratio) * 200, 100.0)
    else:
        shift, strength = "neutral", 0.0

    return VolumeAnalysis(
        shift=shift,
        strength=strength,
        buyer_volume=buyer_volume,
        seller_volume=seller_volume
    )
