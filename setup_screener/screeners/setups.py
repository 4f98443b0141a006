"""
Setup classification.

Classification walks explicit ordered tables of SetupRule(reason, predicate,
scorer) and returns the first rule whose predicate holds. With Leo mode on,
the Leo reversal table is tried before the standard table; a ticker matching
no rule gets no setup and is excluded from results.

Scores are only comparable between tickers with the same SetupReason.
"""
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Tuple

import pandas as pd

from setup_screener.config import ScreenerParams
from setup_screener.indicators.candlestick import BEARISH_PATTERNS, BULLISH_PATTERNS
from setup_screener.indicators.snapshot import Indicators

SetupReason = Literal[
    "Breakout",
    "Momentum",
    "Pullback",
    "Fib Pullback",
    "Consolidation",
    "Reversal",
    # Leo methodology
    "Reversal_Accumulation",
    "Reversal_Distribution",
    "BB_Lower_Bounce",
    "BB_Upper_Reject",
    "Stoch_Oversold_Reversal",
    "Stoch_Overbought_Reversal",
]

Predicate = Callable[[pd.DataFrame, Indicators, ScreenerParams], bool]
Scorer = Callable[[pd.DataFrame, Indicators, ScreenerParams], float]


@dataclass(frozen=True)
class SetupRule:
    """One predicate -> outcome pair of a classification table."""
    reason: str
    predicate: Predicate
    scorer: Scorer


@dataclass(frozen=True)
class SetupMatch:
    """Classification result for one ticker."""
    reason: str
    score: float


def _last_close(df: pd.DataFrame) -> float:
    return float(df['Close'].iloc[-1])


def _last_volume(df: pd.DataFrame) -> float:
    return float(df['Volume'].iloc[-1])


def _or(value: Optional[float], default: float) -> float:
    return default if value is None else value


# =====================================================
# Standard setups
# =====================================================

def is_breakout(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    """Close above the prior 20-bar high on more than 1.5x average volume."""
    if ind.hh20 is None or ind.ll20 is None:
        return False
    avg_volume = _or(ind.avg_vol20, 0.0)
    return _last_close(df) > ind.hh20 and _last_volume(df) > avg_volume * 1.5


def is_momentum(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    return (
        ind.rsi14 is not None and ind.rsi14 > 60
        and ind.adx14 is not None and ind.adx14 > 25
        and ind.trend == "up"
    )


def is_fib_pullback(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    return bool(ind.fib_hit and ind.reaction_bullish)


def is_pullback(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    """Uptrend with price back near SMA20 and RSI cooled to 30-50."""
    if not ind.sma20 or ind.rsi14 is None:
        return False
    return ind.trend == "up" and _last_close(df) <= ind.sma20 * 1.02 and 30 < ind.rsi14 < 50


def is_consolidation(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    """Narrow Bollinger Bands with a weak trend."""
    return (
        ind.bb_width is not None and ind.bb_width < 0.1
        and ind.adx14 is not None and ind.adx14 < 20
    )


def is_reversal(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    """Stretched RSI in the direction of the trend, close to support/resistance."""
    if ind.rsi14 is None or ind.sr_distance_pct is None:
        return False
    stretched = (ind.rsi14 < 30 and ind.trend == "down") or (ind.rsi14 > 70 and ind.trend == "up")
    return stretched and ind.sr_distance_pct < 2


def breakout_score(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> float:
    avg_volume = ind.avg_vol20 or 1.0
    return min(_last_volume(df) / avg_volume * 10, 100.0)


def momentum_score(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> float:
    return (_or(ind.rsi14, 50.0) - 50) + _or(ind.adx14, 0.0)


def pullback_score(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> float:
    if not ind.sma20:
        return 0.0
    rsi_value = _or(ind.rsi14, 50.0)
    price_score = max(0.0, 100 - abs(_last_close(df) - ind.sma20) / ind.sma20 * 100)
    rsi_score = max(0.0, 50 - rsi_value)
    return price_score + rsi_score


def fib_pullback_score(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> float:
    return pullback_score(df, ind, params) * 1.2


def consolidation_score(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> float:
    width = _or(ind.bb_width, 1.0)
    adx_value = _or(ind.adx14, 50.0)
    return max(0.0, 100 - width * 1000) + max(0.0, 50 - adx_value)


def reversal_score(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> float:
    rsi_extreme = max(0.0, abs(_or(ind.rsi14, 50.0) - 50) - 20)
    proximity = max(0.0, 10 - _or(ind.sr_distance_pct, 10.0)) * 10
    return rsi_extreme + proximity


# Fib Pullback is checked before the plain Pullback
STANDARD_RULES: Tuple[SetupRule, ...] = (
    SetupRule("Breakout", is_breakout, breakout_score),
    SetupRule("Momentum", is_momentum, momentum_score),
    SetupRule("Fib Pullback", is_fib_pullback, fib_pullback_score),
    SetupRule("Pullback", is_pullback, pullback_score),
    SetupRule("Consolidation", is_consolidation, consolidation_score),
    SetupRule("Reversal", is_reversal, reversal_score),
)


# =====================================================
# Leo reversal setups
# =====================================================

def in_bullish_zone(ind: Indicators, params: ScreenerParams) -> bool:
    """%B below 0.2 and %K below the oversold threshold."""
    return (
        ind.bb_percent_b is not None and ind.bb_percent_b < 0.2
        and ind.stoch_k is not None and ind.stoch_k < params.leo.stoch_oversold_threshold
    )


def in_bearish_zone(ind: Indicators, params: ScreenerParams) -> bool:
    """%B above 0.8 and %K above the overbought threshold."""
    return (
        ind.bb_percent_b is not None and ind.bb_percent_b > 0.8
        and ind.stoch_k is not None and ind.stoch_k > params.leo.stoch_overbought_threshold
    )


def pattern_allowed(ind: Indicators, params: ScreenerParams) -> bool:
    """An empty allow-list accepts every pattern."""
    allowed = params.leo.candlestick_patterns
    return not allowed or ind.candlestick_pattern in allowed


def _has_pattern(ind: Indicators, params: ScreenerParams, family: Tuple[str, ...]) -> bool:
    return ind.candlestick_pattern in family and pattern_allowed(ind, params)


def _volume_confirms(ind: Indicators, params: ScreenerParams, side: str) -> bool:
    strength = _or(ind.volume_shift_strength, 0.0)
    return ind.volume_shift == side and (not params.leo.require_volume_shift or strength > 30)


def is_reversal_accumulation(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    return (
        in_bullish_zone(ind, params)
        and _has_pattern(ind, params, BULLISH_PATTERNS)
        and _volume_confirms(ind, params, "buyer")
    )


def is_bb_lower_bounce(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    return (
        in_bullish_zone(ind, params)
        and _has_pattern(ind, params, BULLISH_PATTERNS)
        and params.leo.bb_bounce_enabled
    )


def is_stoch_oversold_reversal(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    return in_bullish_zone(ind, params) and ind.stoch_k < 20


def is_reversal_distribution(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    return (
        in_bearish_zone(ind, params)
        and _has_pattern(ind, params, BEARISH_PATTERNS)
        and _volume_confirms(ind, params, "seller")
    )


def is_bb_upper_reject(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    return (
        in_bearish_zone(ind, params)
        and _has_pattern(ind, params, BEARISH_PATTERNS)
        and params.leo.bb_bounce_enabled
    )


def is_stoch_overbought_reversal(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> bool:
    return in_bearish_zone(ind, params) and ind.stoch_k > 80


def leo_reversal_score(ind: Indicators, direction: str) -> float:
    """
    Base 70, adjusted by how far %B and %K sit past their thresholds, plus
    0.2x volume-shift strength and 10 for a confirmed entry. Capped at 100.
    """
    score = 70.0

    if ind.bb_percent_b is not None:
        if direction == "bullish":
            score += (0.2 - ind.bb_percent_b) * 50
        else:
            score += (ind.bb_percent_b - 0.8) * 50

    if ind.stoch_k is not None:
        if direction == "bullish":
            score += (30 - ind.stoch_k) / 2
        else:
            score += (ind.stoch_k - 70) / 2

    score += _or(ind.volume_shift_strength, 0.0) * 0.2

    if ind.entry_confirmed:
        score += 10

    return min(score, 100.0)


LEO_RULES: Tuple[SetupRule, ...] = (
    SetupRule(
        "Reversal_Accumulation",
        is_reversal_accumulation,
        lambda df, ind, params: leo_reversal_score(ind, "bullish")
    ),
    SetupRule(
        "BB_Lower_Bounce",
        is_bb_lower_bounce,
        lambda df, ind, params: 75 + (100 - ind.bb_percent_b * 100)
    ),
    SetupRule(
        "Stoch_Oversold_Reversal",
        is_stoch_oversold_reversal,
        lambda df, ind, params: 65 + (20 - ind.stoch_k)
    ),
    SetupRule(
        "Reversal_Distribution",
        is_reversal_distribution,
        lambda df, ind, params: leo_reversal_score(ind, "bearish")
    ),
    SetupRule(
        "BB_Upper_Reject",
        is_bb_upper_reject,
        lambda df, ind, params: 75 + (ind.bb_percent_b - 0.8) * 500
    ),
    SetupRule(
        "Stoch_Overbought_Reversal",
        is_stoch_overbought_reversal,
        lambda df, ind, params: 65 + (ind.stoch_k - 80)
    ),
)


def first_match(
    rules: Tuple[SetupRule, ...],
    df: pd.DataFrame,
    ind: Indicators,
    params: ScreenerParams
) -> Optional[SetupMatch]:
    """Evaluate rules in order and return the first that matches."""
    for rule in rules:
        if rule.predicate(df, ind, params):
            return SetupMatch(reason=rule.reason, score=float(rule.scorer(df, ind, params)))
    return None


def classify_setup(df: pd.DataFrame, ind: Indicators, params: ScreenerParams) -> Optional[SetupMatch]:
    """
    Assign at most one setup to a ticker.

    Returns:
        SetupMatch with reason and score, or None when no rule applies
    """
    if params.leo.enabled:
        match = first_match(LEO_RULES, df, ind, params)
        if match is not None:
            return match
    return first_match(STANDARD_RULES, df, ind, params)
