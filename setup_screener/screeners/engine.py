"""
Screening engine - filters, classifies, ranks and assembles picks.

One run is a pure computation over the supplied time series and metadata:
nothing is fetched, cached or kept between runs. Tickers that cannot be
screened (missing metadata, short history, failed filter, no matching setup)
are dropped and counted in ScreenStats; they never raise.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from setup_screener.config import (
    DEFAULT_CONFIG,
    FIXED_FILTERS,
    FixedFilters,
    IndicatorConfig,
    ScreenerParams,
    assert_fixed_filters,
)
from setup_screener.data.index_lists import is_ticker_in_indices
from setup_screener.data.models import OHLCV_COLUMNS, Candle, TickerMeta, candles_to_frame
from setup_screener.indicators.snapshot import Indicators, compute_indicators
from setup_screener.screeners.filters import (
    IndexLookup,
    passes_fixed_filters,
    passes_indicator_filters,
    passes_leo_filters,
    passes_user_filters,
)
from setup_screener.screeners.price_targets import PriceTarget, calculate_price_targets
from setup_screener.screeners.ranking import rank_and_cap
from setup_screener.screeners.setups import SetupMatch, classify_setup

logger = logging.getLogger(__name__)

TimeSeries = Union[pd.DataFrame, Sequence[Candle]]

REVERSAL_TIMELINE = "3-5 candles"

# Exclusion stages, in pipeline order
MISSING_METADATA = "missing_metadata"
INSUFFICIENT_HISTORY = "insufficient_history"
FIXED_FILTER = "fixed_filters"
USER_FILTER = "user_filters"
LEO_FILTER = "leo_filters"
INDICATOR_FILTER = "indicator_filters"
UNCLASSIFIED = "unclassified"


@dataclass
class ClassifiedPick:
    """One ranked result. Leo fields are None unless Leo mode is enabled."""
    ticker: str
    company: Optional[str]
    price: float
    market_cap: Optional[float]
    volume: float
    relative_volume: Optional[float]
    rsi: Optional[float]
    sector: Optional[str]
    trend: Optional[str]
    next_earnings_date: Optional[str]
    selection_reason: str
    score: float

    # Leo methodology
    candlestick_pattern: Optional[str] = None
    volume_shift: Optional[str] = None
    volume_shift_strength: Optional[float] = None
    bb_position: Optional[str] = None
    bb_percent_b: Optional[float] = None
    stoch_position: Optional[str] = None
    stoch_k: Optional[float] = None
    earnings_warning: Optional[bool] = None
    entry_confirmed: Optional[bool] = None
    price_targets: Optional[List[PriceTarget]] = None
    reversal_timeline: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form. The internal score is not part of the output."""
        data = asdict(self)
        data.pop("score")
        return data

    def __str__(self) -> str:
        return f"{self.ticker}: {self.selection_reason} @ ${self.price:.2f}"


@dataclass
class ScreenStats:
    """Per-stage exclusion counts for one run."""
    universe_size: int = 0
    excluded: Dict[str, int] = field(default_factory=dict)
    classified: int = 0
    returned: int = 0
    execution_time_seconds: float = 0.0

    def exclude(self, stage: str) -> None:
        self.excluded[stage] = self.excluded.get(stage, 0) + 1


@dataclass
class EngineOutput:
    as_of_date: str
    picks: List[ClassifiedPick]
    stats: ScreenStats = field(default_factory=ScreenStats)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "as_of_date": self.as_of_date,
            "picks": [pick.to_dict() for pick in self.picks],
        }


@dataclass
class _Analysis:
    """Outcome of the per-ticker pass: either a match or the exclusion stage."""
    ticker: str
    excluded_at: Optional[str] = None
    df: Optional[pd.DataFrame] = None
    meta: Optional[TickerMeta] = None
    indicators: Optional[Indicators] = None
    match: Optional[SetupMatch] = None


def _as_frame(series: Optional[TimeSeries]) -> pd.DataFrame:
    if series is None:
        return pd.DataFrame(columns=OHLCV_COLUMNS, dtype=float)
    if isinstance(series, pd.DataFrame):
        return series
    return candles_to_frame(list(series))


def bb_position(percent_b: Optional[float]) -> Optional[str]:
    if percent_b is None:
        return None
    if percent_b < 0.1:
        return "lower_bounce"
    if percent_b > 0.9:
        return "upper_reject"
    return "middle"


def stoch_position(stoch_k: Optional[float], params: ScreenerParams) -> Optional[str]:
    if stoch_k is None:
        return None
    if stoch_k < params.leo.stoch_oversold_threshold:
        return "oversold"
    if stoch_k > params.leo.stoch_overbought_threshold:
        return "overbought"
    return "neutral"


class ScreenerEngine:
    """
    Runs the screening pipeline.

    The fixed filters and index lookup are injected so tests can substitute
    them; the fixed filters are checked against the required values once, at
    construction, and a mismatch raises FixedFiltersError.
    """

    def __init__(
        self,
        fixed_filters: FixedFilters = FIXED_FILTERS,
        index_lookup: IndexLookup = is_ticker_in_indices,
        indicator_config: IndicatorConfig = DEFAULT_CONFIG.indicators,
        max_workers: Optional[int] = None
    ):
        """
        Args:
            fixed_filters: Liquidity/price floor, must equal the required values
            index_lookup: Callable(ticker, index_names) -> bool for the Leo index filter
            indicator_config: Indicator window lengths
            max_workers: Run the per-ticker pass on a thread pool of this size
        """
        assert_fixed_filters(fixed_filters)
        self.fixed_filters = fixed_filters
        self.index_lookup = index_lookup
        self.indicator_config = indicator_config
        self.max_workers = max_workers

    def run(
        self,
        params: ScreenerParams,
        timeseries: Mapping[str, TimeSeries],
        metadata: Mapping[str, TickerMeta]
    ) -> EngineOutput:
        """
        Screen every ticker in ``timeseries``.

        Args:
            params: Validated run parameters
            timeseries: Ticker -> OHLCV DataFrame or Candle sequence, ascending
            metadata: Ticker -> TickerMeta; tickers without an entry are dropped

        Returns:
            EngineOutput with at most params.max_results picks
        """
        start_time = time.time()
        tickers = list(timeseries)
        stats = ScreenStats(universe_size=len(tickers))

        logger.info(
            "Screening %d tickers as of %s (leo=%s)",
            len(tickers), params.as_of_date, params.leo.enabled
        )

        analyses = self._analyze_all(params, tickers, timeseries, metadata)

        candidates: List[Tuple[str, float, _Analysis]] = []
        for analysis in analyses:
            if analysis.excluded_at is not None:
                stats.exclude(analysis.excluded_at)
                continue
            candidates.append((analysis.match.reason, analysis.match.score, analysis))
        stats.classified = len(candidates)

        ranked = rank_and_cap(candidates, params.max_results, params.leo.enabled)
        picks = [self._build_pick(analysis, params) for analysis in ranked]

        stats.returned = len(picks)
        stats.execution_time_seconds = time.time() - start_time
        logger.info(
            "Classified %d of %d tickers, returning %d picks in %.2fs",
            stats.classified, stats.universe_size, stats.returned, stats.execution_time_seconds
        )

        return EngineOutput(as_of_date=params.as_of_date, picks=picks, stats=stats)

    def _analyze_all(
        self,
        params: ScreenerParams,
        tickers: List[str],
        timeseries: Mapping[str, TimeSeries],
        metadata: Mapping[str, TickerMeta]
    ) -> List[_Analysis]:
        """Per-ticker pass, returned in input order regardless of completion order."""
        if not self.max_workers or self.max_workers <= 1 or len(tickers) <= 1:
            return [
                self.analyze_ticker(ticker, timeseries[ticker], metadata.get(ticker), params)
                for ticker in tickers
            ]

        results: List[Optional[_Analysis]] = [None] * len(tickers)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index = {
                executor.submit(
                    self.analyze_ticker, ticker, timeseries[ticker], metadata.get(ticker), params
                ): i
                for i, ticker in enumerate(tickers)
            }
            for future in as_completed(future_to_index):
                results[future_to_index[future]] = future.result()

        return results

    def analyze_ticker(
        self,
        ticker: str,
        series: TimeSeries,
        meta: Optional[TickerMeta],
        params: ScreenerParams
    ) -> _Analysis:
        """Run the filter stages and classification for one ticker."""
        if meta is None:
            logger.debug("%s: no metadata, skipped", ticker)
            return _Analysis(ticker, excluded_at=MISSING_METADATA)

        df = _as_frame(series)
        if len(df) < self.fixed_filters.min_bars:
            logger.debug("%s: %d bars, need %d", ticker, len(df), self.fixed_filters.min_bars)
            return _Analysis(ticker, excluded_at=INSUFFICIENT_HISTORY)

        if not passes_fixed_filters(df, self.fixed_filters):
            logger.debug("%s: failed fixed filters", ticker)
            return _Analysis(ticker, excluded_at=FIXED_FILTER)

        if not passes_user_filters(meta, params):
            logger.debug("%s: failed sector/industry/market cap filters", ticker)
            return _Analysis(ticker, excluded_at=USER_FILTER)

        if not passes_leo_filters(ticker, df, params, self.index_lookup):
            logger.debug("%s: failed Leo price/index filters", ticker)
            return _Analysis(ticker, excluded_at=LEO_FILTER)

        ind = compute_indicators(df, params, meta, self.indicator_config)
        if not passes_indicator_filters(ind, params):
            logger.debug("%s: failed indicator filters", ticker)
            return _Analysis(ticker, excluded_at=INDICATOR_FILTER)

        match = classify_setup(df, ind, params)
        if match is None:
            logger.debug("%s: no setup matched", ticker)
            return _Analysis(ticker, excluded_at=UNCLASSIFIED)

        logger.debug("%s: %s (score %.1f)", ticker, match.reason, match.score)
        return _Analysis(ticker, df=df, meta=meta, indicators=ind, match=match)

    def _build_pick(self, analysis: _Analysis, params: ScreenerParams) -> ClassifiedPick:
        df, meta, ind = analysis.df, analysis.meta, analysis.indicators

        pick = ClassifiedPick(
            ticker=analysis.ticker,
            company=meta.company,
            price=float(df['Close'].iloc[-1]),
            market_cap=meta.market_cap,
            volume=float(df['Volume'].iloc[-1]),
            relative_volume=ind.rel_vol,
            rsi=ind.rsi14,
            sector=meta.sector,
            trend=ind.trend,
            next_earnings_date=meta.next_earnings_date,
            selection_reason=analysis.match.reason,
            score=analysis.match.score,
        )

        if params.leo.enabled:
            pick.candlestick_pattern = ind.candlestick_pattern
            pick.volume_shift = ind.volume_shift
            pick.volume_shift_strength = ind.volume_shift_strength
            pick.bb_position = bb_position(ind.bb_percent_b)
            pick.bb_percent_b = ind.bb_percent_b
            pick.stoch_position = stoch_position(ind.stoch_k, params)
            pick.stoch_k = ind.stoch_k
            pick.earnings_warning = ind.earnings_warning
            pick.entry_confirmed = ind.entry_confirmed
            pick.price_targets = calculate_price_targets(df, ind)
            pick.reversal_timeline = REVERSAL_TIMELINE

        return pick


def run(
    params: ScreenerParams,
    timeseries: Mapping[str, TimeSeries],
    metadata: Mapping[str, TickerMeta],
    *,
    fixed_filters: FixedFilters = FIXED_FILTERS,
    index_lookup: IndexLookup = is_ticker_in_indices,
    max_workers: Optional[int] = None
) -> EngineOutput:
    """Screen a universe in one call. See ScreenerEngine.run."""
    engine = ScreenerEngine(
        fixed_filters=fixed_filters,
        index_lookup=index_lookup,
        max_workers=max_workers
    )
    return engine.run(params, timeseries, metadata)
