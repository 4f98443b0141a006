"""
Market data: records, providers, index constituents and CSV import.
"""
from setup_screener.data.models import (
    OHLCV_COLUMNS,
    Candle,
    TickerMeta,
    candles_to_frame,
    frame_to_candles
)
from setup_screener.data.provider import DataProvider, DataProviderError
from setup_screener.data.cache_manager import CacheManager, get_cache
from setup_screener.data.cached_provider import CachedProvider
from setup_screener.data.yfinance_provider import YFinanceProvider, fetch_ohlcv
from setup_screener.data.mock_provider import MockDataProvider, get_mock_data
from setup_screener.data.index_lists import (
    INDEX_CONSTITUENTS,
    is_ticker_in_indices,
    filter_by_indices,
    get_index_tickers,
    get_index_display_name
)
from setup_screener.data.csv_importer import ImportResult, import_csv

__all__ = [
    "OHLCV_COLUMNS",
    "Candle",
    "TickerMeta",
    "candles_to_frame",
    "frame_to_candles",
    "DataProvider",
    "DataProviderError",
    "CacheManager",
    "get_cache",
    "CachedProvider",
    "YFinanceProvider",
    "fetch_ohlcv",
    "MockDataProvider",
    "get_mock_data",
    "INDEX_CONSTITUENTS",
    "is_ticker_in_indices",
    "filter_by_indices",
    "get_index_tickers",
    "get_index_display_name",
    "ImportResult",
    "import_csv"
]
