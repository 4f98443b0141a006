"""
Abstract base class for data providers.
"""
from abc import ABC, abstractmethod

import pandas as pd

from setup_screener.data.models import TickerMeta


class DataProviderError(Exception):
    """Raised when a provider or importer cannot supply data for a ticker."""
    pass


class DataProvider(ABC):
    """
    Abstract interface for market data sources.

    Providers supply the two inputs of a screening run: per-ticker OHLCV
    history and per-ticker metadata. The engine never calls a provider
    itself; the CLI and library helpers fetch first, then screen.
    """

    @abstractmethod
    def get_ohlcv(
        self,
        ticker: str,
        period: str = "2y",
        interval: str = "1d"
    ) -> pd.DataFrame:
        """
        Fetch OHLCV data for a given ticker.

        Args:
            ticker: Stock symbol (e.g., "NVDA", "AAPL")
            period: How far back to fetch (e.g., "1y", "2y", "10y")
            interval: Bar size ("1d", "1wk", "1mo")

        Returns:
            DataFrame with columns: Open, High, Low, Close, Volume
            Index is an ascending DatetimeIndex

        Raises:
            DataProviderError: If data cannot be fetched
        """
        pass

    @abstractmethod
    def get_ticker_meta(self, ticker: str) -> TickerMeta:
        """
        Fetch company name, sector, industry, market cap and next earnings date.

        Raises:
            DataProviderError: If the ticker is unknown to the source
        """
        pass

    @abstractmethod
    def get_current_price(self, ticker: str) -> float:
        """Most recent closing (or last traded) price."""
        pass
