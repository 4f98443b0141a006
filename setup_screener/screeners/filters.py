"""
Filter pipeline stages.

Each stage is a predicate over one ticker; the engine applies them in order
and drops the ticker at the first failure:

1. fixed liquidity/price filters (non-configurable)
2. user sector / industry / market-cap filters
3. Leo price and index filters (Leo mode only)
4. indicator threshold filters (after the indicator snapshot is built)
"""
from typing import Callable, Optional, Sequence

import pandas as pd

from setup_screener.config import FIXED_FILTERS, FixedFilters, ScreenerParams
from setup_screener.data.models import TickerMeta
from setup_screener.indicators.snapshot import Indicators

IndexLookup = Callable[[str, Sequence[str]], bool]


def passes_fixed_filters(df: pd.DataFrame, filters: FixedFilters = FIXED_FILTERS) -> bool:
    """
    Liquidity and price floor.

    Requires at least ``min_bars`` bars, and strictly greater than the floor for
    last close, 20-bar average volume and relative volume. Equality fails.
    """
    if len(df) < filters.min_bars:
        return False

    last_close = float(df['Close'].iloc[-1])
    if not last_close > filters.min_price:
        return False

    avg_volume_20 = float(df['Volume'].iloc[-20:].mean())
    if not avg_volume_20 > filters.min_avg_volume_20:
        return False

    relative_vol = float(df['Volume'].iloc[-1]) / avg_volume_20
    return relative_vol > filters.min_relative_volume


def passes_user_filters(meta: TickerMeta, params: ScreenerParams) -> bool:
    """Sector/industry exact match (unless "*") and market cap within bounds."""
    if params.user_sector != "*" and meta.sector != params.user_sector:
        return False
    if params.user_industry != "*" and meta.industry != params.user_industry:
        return False

    market_cap = meta.market_cap or 0
    return params.market_cap_min <= market_cap <= params.market_cap_max


def passes_leo_filters(
    ticker: str,
    df: pd.DataFrame,
    params: ScreenerParams,
    index_lookup: IndexLookup
) -> bool:
    """
    Leo minimum price and index membership.

    Always passes when Leo mode is off. An empty index selection passes.
    """
    if not params.leo.enabled:
        return True
    if float(df['Close'].iloc[-1]) < params.leo.min_price:
        return False
    if params.leo.index_filters and not index_lookup(ticker, params.leo.index_filters):
        return False
    return True


def _within(value: Optional[float], low: float, high: float) -> bool:
    return value is not None and low <= value <= high


def passes_indicator_filters(ind: Indicators, params: ScreenerParams) -> bool:
    """
    Indicator thresholds from the run parameters.

    The stochastic bounds are skipped in Leo mode, which applies its own
    oversold/overbought thresholds during classification.
    """
    if not _within(ind.rsi14, params.rsi_min, params.rsi_max):
        return False

    if not params.leo.enabled and not _within(ind.stoch_k, params.stoch_k_min, params.stoch_k_max):
        return False

    if params.trend_type != "*" and ind.trend != params.trend_type:
        return False

    if ind.adx14 is None or ind.adx14 < params.adx_min:
        return False

    if params.ma_cross != "none":
        if ind.sma20 is None or ind.sma50 is None or ind.sma200 is None:
            return False
        fast, slow = {
            "20>50": (ind.sma20, ind.sma50),
            "50>200": (ind.sma50, ind.sma200),
            "20>200": (ind.sma20, ind.sma200),
        }[params.ma_cross]
        if not fast > slow:
            return False

    if ind.sr_distance_pct is not None and ind.sr_distance_pct > params.sr_proximity_pct:
        return False

    return True
