"""
Yahoo Finance data provider implementation using yfinance.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

import pandas as pd
import yfinance as yf

from setup_screener.data.models import OHLCV_COLUMNS, TickerMeta
from setup_screener.data.provider import DataProvider, DataProviderError

logger = logging.getLogger(__name__)


def _to_iso(value: Any) -> Optional[str]:
    """Best-effort conversion of a yfinance date-ish value to YYYY-MM-DD."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return _to_iso(value[0]) if value else None
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, (int, float)):
        # epoch seconds, as in info['earningsTimestamp']
        return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d")
    try:
        return pd.Timestamp(value).strftime("%Y-%m-%d")
    except (ValueError, TypeError):
        return None


class YFinanceProvider(DataProvider):
    """
    Data provider using Yahoo Finance via yfinance library.

    Free and keyless, good for daily/weekly/monthly OHLCV on US equities.

    Note: yfinance is unofficial and can occasionally break.
    """

    def __init__(self, cache_enabled: bool = True):
        """
        Args:
            cache_enabled: Whether to cache ticker objects (reduces API calls)
        """
        self.cache_enabled = cache_enabled
        self._ticker_cache: Dict[str, yf.Ticker] = {}

    def _get_ticker(self, symbol: str) -> yf.Ticker:
        """Get or create a Ticker object, with optional caching."""
        if self.cache_enabled and symbol in self._ticker_cache:
            return self._ticker_cache[symbol]

        ticker = yf.Ticker(symbol)

        if self.cache_enabled:
            self._ticker_cache[symbol] = ticker

        return ticker

    def get_ohlcv(
        self,
        ticker: str,
        period: str = "2y",
        interval: str = "1d"
    ) -> pd.DataFrame:
        """
        Fetch OHLCV data from Yahoo Finance.

        Args:
            ticker: Stock symbol (e.g., "NVDA")
            period: Valid periods: 1mo,3mo,6mo,1y,2y,5y,10y,ytd,max
            interval: Valid intervals: 1d,1wk,1mo

        Returns:
            DataFrame with OHLCV data, tz-naive DatetimeIndex

        Raises:
            DataProviderError: If ticker not found or data unavailable
        """
        try:
            df = self._get_ticker(ticker).history(period=period, interval=interval)
        except Exception as e:
            raise DataProviderError(f"Failed to fetch data for '{ticker}': {e}") from e

        if df.empty:
            raise DataProviderError(
                f"No data returned for ticker '{ticker}'. "
                "Check if the symbol is valid."
            )

        # yfinance includes 'Dividends' and 'Stock Splits' - drop them
        df = df[OHLCV_COLUMNS].dropna().copy()
        df.index = pd.to_datetime(df.index)
        if df.index.tz is not None:
            df.index = df.index.tz_localize(None)
        df.index.name = 'Date'

        logger.debug("Fetched %d %s bars for %s", len(df), interval, ticker)
        return df

    def get_ticker_meta(self, ticker: str) -> TickerMeta:
        """
        Build TickerMeta from Ticker.info and the earnings calendar.

        Raises:
            DataProviderError: If Yahoo returns no profile for the symbol
        """
        yf_ticker = self._get_ticker(ticker)
        try:
            info = yf_ticker.info or {}
        except Exception as e:
            raise DataProviderError(f"Failed to fetch info for '{ticker}': {e}") from e

        if not info:
            raise DataProviderError(f"No profile returned for ticker '{ticker}'")

        return TickerMeta(
            ticker=ticker,
            company=info.get('longName') or info.get('shortName'),
            sector=info.get('sector'),
            industry=info.get('industry'),
            market_cap=info.get('marketCap'),
            next_earnings_date=self._next_earnings_date(yf_ticker, info),
        )

    def _next_earnings_date(self, yf_ticker: yf.Ticker, info: Dict[str, Any]) -> Optional[str]:
        try:
            calendar = yf_ticker.calendar
        except Exception as e:
            logger.debug("No earnings calendar for %s: %s", yf_ticker.ticker, e)
            calendar = None

        if isinstance(calendar, dict) and calendar.get('Earnings Date'):
            return _to_iso(calendar['Earnings Date'])
        if isinstance(calendar, pd.DataFrame) and 'Earnings Date' in calendar.index:
            return _to_iso(calendar.loc['Earnings Date'].iloc[0])
        return _to_iso(info.get('earningsTimestamp'))

    def get_current_price(self, ticker: str) -> float:
        """Last closing price from recent daily data."""
        df = self.get_ohlcv(ticker, period="5d", interval="1d")
        return float(df['Close'].iloc[-1])


def fetch_ohlcv(ticker: str, period: str = "2y", interval: str = "1d") -> pd.DataFrame:
    """
    Quick helper to fetch OHLCV data.

    Usage:
        df = fetch_ohlcv("NVDA", "2y")
    """
    return YFinanceProvider().get_ohlcv(ticker, period, interval)
