"""
Technical indicators for setup screening.

Pure functions over one ticker's OHLCV DataFrame. Each returns None (or an
empty/neutral result) when the series is too short instead of raising.
"""
from setup_screener.indicators.moving_average import sma, determine_trend
from setup_screener.indicators.oscillators import rsi, stochastic_k, adx, directional_movement
from setup_screener.indicators.atr import compute_true_range, compute_atr_series, atr
from setup_screener.indicators.bollinger import (
    BollingerBands,
    bollinger_bands,
    bollinger_bands_extended
)
from setup_screener.indicators.fibonacci import FibonacciResult, analyze_fibonacci, fibonacci_levels
from setup_screener.indicators.candlestick import (
    BULLISH_PATTERNS,
    BEARISH_PATTERNS,
    detect_candlestick_pattern
)
from setup_screener.indicators.volume import VolumeAnalysis, analyze_volume_shift, relative_volume
from setup_screener.indicators.structure import (
    FVGZone,
    SwingPoint,
    support_resistance_distance,
    detect_fvgs,
    detect_swing_points,
    check_entry_confirmation,
    check_earnings_warning
)
from setup_screener.indicators.snapshot import Indicators, compute_indicators

__all__ = [
    "sma",
    "determine_trend",
    "rsi",
    "stochastic_k",
    "adx",
    "directional_movement",
    "compute_true_range",
    "compute_atr_series",
    "atr",
    "BollingerBands",
    "bollinger_bands",
    "bollinger_bands_extended",
    "FibonacciResult",
    "analyze_fibonacci",
    "fibonacci_levels",
    "BULLISH_PATTERNS",
    "BEARISH_PATTERNS",
    "detect_candlestick_pattern",
    "VolumeAnalysis",
    "analyze_volume_shift",
    "relative_volume",
    "FVGZone",
    "SwingPoint",
    "support_resistance_distance",
    "detect_fvgs",
    "detect_swing_points",
    "check_entry_confirmation",
    "check_earnings_warning",
    "Indicators",
    "compute_indicators"
]
