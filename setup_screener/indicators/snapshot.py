"""
Per-ticker indicator snapshot.

compute_indicators() runs the whole indicator library over one ticker's
history and collects the results in an Indicators record. Every field is
independently optional: a value is None when its series was too short or,
for the Leo-only fields, when Leo mode is off.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import pandas as pd

from setup_screener.config import (
    DEFAULT_CONFIG,
    CandlestickPattern,
    IndicatorConfig,
    ScreenerParams,
    Trend,
)
from setup_screener.data.models import TickerMeta
from setup_screener.indicators.atr import atr
from setup_screener.indicators.bollinger import bollinger_bands, bollinger_bands_extended
from setup_screener.indicators.candlestick import detect_candlestick_pattern
from setup_screener.indicators.fibonacci import analyze_fibonacci
from setup_screener.indicators.moving_average import determine_trend, sma
from setup_screener.indicators.oscillators import adx, rsi, stochastic_k
from setup_screener.indicators.structure import (
    FVGZone,
    SwingPoint,
    check_earnings_warning,
    check_entry_confirmation,
    detect_fvgs,
    detect_swing_points,
    support_resistance_distance,
)
from setup_screener.indicators.volume import VolumeShift, analyze_volume_shift


@dataclass
class Indicators:
    """Computed indicator values for one ticker and one run."""
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    rsi14: Optional[float] = None
    stoch_k: Optional[float] = None
    atr: Optional[float] = None               # ATR(atr_lookback)
    adx14: Optional[float] = None
    avg_vol20: Optional[float] = None
    rel_vol: Optional[float] = None           # last volume / avg_vol20
    hh20: Optional[float] = None              # highest high of the 20 bars before the latest
    ll20: Optional[float] = None              # lowest low of the 20 bars before the latest
    bb_width: Optional[float] = None          # (upper - lower) / SMA20
    trend: Optional[Trend] = None
    sr_distance_pct: Optional[float] = None   # distance to nearest 20-bar S/R in %
    fib_hit: Optional[bool] = None
    reaction_bullish: Optional[bool] = None

    # Leo methodology
    bb_upper: Optional[float] = None
    bb_middle: Optional[float] = None
    bb_lower: Optional[float] = None
    bb_percent_b: Optional[float] = None
    candlestick_pattern: Optional[CandlestickPattern] = None
    volume_shift: Optional[VolumeShift] = None
    volume_shift_strength: Optional[float] = None
    fvg_zones: Optional[List[FVGZone]] = None
    swing_highs: Optional[List[SwingPoint]] = None
    swing_lows: Optional[List[SwingPoint]] = None
    earnings_warning: Optional[bool] = None
    entry_confirmed: Optional[bool] = None


def _prior_extreme(series: pd.Series, window: int, highest: bool) -> Optional[float]:
    prior = series.iloc[-(window + 1):-1]
    if len(prior) < window:
        return None
    return float(prior.max() if highest else prior.min())


def compute_indicators(
    df: pd.DataFrame,
    params: ScreenerParams,
    meta: Optional[TickerMeta] = None,
    config: IndicatorConfig = DEFAULT_CONFIG.indicators
) -> Indicators:
    """
    Build the indicator snapshot for one ticker.

    Args:
        df: OHLCV DataFrame, ascending
        params: Run parameters (lookbacks, Fibonacci settings, Leo flags)
        meta: Ticker metadata, used for the earnings warning
        config: Indicator window lengths

    Returns:
        Indicators with every computable field filled
    """
    closes = df['Close']
    volumes = df['Volume']
    ind = Indicators()

    ind.sma20 = sma(closes, 20)
    ind.sma50 = sma(closes, 50)
    ind.sma200 = sma(closes, 200)
    ind.rsi14 = rsi(closes, config.rsi_period)
    ind.stoch_k = stochastic_k(df, config.stoch_k_period)
    ind.atr = atr(df, params.atr_lookback)
    ind.adx14 = adx(df, config.adx_period)

    ind.avg_vol20 = sma(volumes, config.volume_window)
    if ind.avg_vol20:
        ind.rel_vol = float(volumes.iloc[-1]) / ind.avg_vol20

    ind.hh20 = _prior_extreme(df['High'], 20, highest=True)
    ind.ll20 = _prior_extreme(df['Low'], 20, highest=False)

    bands = bollinger_bands(closes, config.bb_period, config.bb_std_multiplier)
    if bands is not None and ind.sma20:
        ind.bb_width = bands.width

    ind.trend = determine_trend(closes, params.trend_lookback)
    ind.sr_distance_pct = support_resistance_distance(df, config.sr_window)

    fib = analyze_fibonacci(df, params.fib_reference, params.fib_zone, config.fib_window)
    ind.fib_hit = fib.hit
    ind.reaction_bullish = fib.bullish_reaction

    if params.leo.enabled:
        extended = bollinger_bands_extended(closes, config.bb_period, config.bb_std_multiplier)
        if extended is not None:
            ind.bb_upper = extended.upper
            ind.bb_middle = extended.middle
            ind.bb_lower = extended.lower
            ind.bb_percent_b = extended.percent_b

        ind.candlestick_pattern = detect_candlestick_pattern(df, ind.atr)

        volume_analysis = analyze_volume_shift(df, config.volume_shift_lookback)
        ind.volume_shift = volume_analysis.shift
        ind.volume_shift_strength = volume_analysis.strength

        ind.fvg_zones = detect_fvgs(df, config.fvg_lookback)
        ind.swing_highs, ind.swing_lows = detect_swing_points(df, config.swing_strength)
        ind.entry_confirmed = check_entry_confirmation(df)

        if meta is not None:
            ind.earnings_warning = check_earnings_warning(
                meta,
                params.leo.earnings_warning_days,
                date.fromisoformat(params.as_of_date)
            )

    return ind
