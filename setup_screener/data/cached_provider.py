"""
Caching wrapper around any DataProvider.
"""
import logging
from dataclasses import asdict
from typing import Dict, Optional

import pandas as pd

from setup_screener.data.cache_manager import CacheManager, get_cache
from setup_screener.data.models import Candle, TickerMeta, candles_to_frame, frame_to_candles
from setup_screener.data.provider import DataProvider

logger = logging.getLogger(__name__)

# hours, by bar interval
OHLCV_TTL_HOURS: Dict[str, float] = {
    "1d": 4,
    "1wk": 24,
    "1mo": 24
}
META_TTL_HOURS = 24


class CachedProvider(DataProvider):
    """
    Serve OHLCV history and metadata from a CacheManager, falling back to
    the wrapped provider on a miss.

    Keys carry the ticker, interval, period and the calendar date of the
    fetch, so a new session never reuses yesterday's bars. Prices are never
    cached.
    """

    def __init__(self, provider: DataProvider, cache: Optional[CacheManager] = None):
        self.provider = provider
        self.cache = cache or get_cache()

    def _as_of(self) -> str:
        return self.cache.clock().date().isoformat()

    def get_ohlcv(
        self,
        ticker: str,
        period: str = "2y",
        interval: str = "1d"
    ) -> pd.DataFrame:
        key = f"ohlcv:{ticker}:{interval}:{period}:{self._as_of()}"

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return candles_to_frame([Candle(**c) for c in cached])

        df = self.provider.get_ohlcv(ticker, period=period, interval=interval)
        self.cache.set(
            key,
            [asdict(c) for c in frame_to_candles(df)],
            ttl=OHLCV_TTL_HOURS.get(interval, META_TTL_HOURS)
        )
        return df

    def get_ticker_meta(self, ticker: str) -> TickerMeta:
        key = f"meta:{ticker}:{self._as_of()}"

        cached = self.cache.get(key)
        if cached is not None:
            return TickerMeta(**cached)

        meta = self.provider.get_ticker_meta(ticker)
        self.cache.set(key, asdict(meta), ttl=META_TTL_HOURS)
        return meta

    def get_current_price(self, ticker: str) -> float:
        return self.provider.get_current_price(ticker)
