#!/usr/bin/env python3
"""
Setup Screener - Main Entry Point

Screens a universe of stocks for technical setups (breakouts, pullbacks,
Leo reversals ...) and returns ranked picks.

Usage:
    # As a CLI tool
    setup-screener screen NVDA AAPL MSFT
    setup-screener screen --index dowjones --leo

    # As a library
    from setup_screener.main import screen_tickers
    output = screen_tickers(["NVDA", "AAPL"])
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Tuple

import pandas as pd

from setup_screener.config import DEFAULT_CONFIG, ScreenerParams
from setup_screener.data import CachedProvider, DataProvider, DataProviderError, TickerMeta, YFinanceProvider
from setup_screener.screeners import EngineOutput, run

logger = logging.getLogger(__name__)


def resolve_timeframe(params: ScreenerParams, timeframe: Optional[str] = None) -> str:
    """Explicit timeframe, else the Leo timeframe in Leo mode, else daily."""
    if timeframe:
        return timeframe
    return params.leo.timeframe if params.leo.enabled else "daily"


def _fetch_one(provider: DataProvider, ticker: str, period: str, interval: str) -> Tuple[pd.DataFrame, TickerMeta]:
    return provider.get_ohlcv(ticker, period=period, interval=interval), provider.get_ticker_meta(ticker)


def load_universe(
    tickers: List[str],
    provider: DataProvider,
    timeframe: str = "daily",
    max_workers: int = DEFAULT_CONFIG.data.max_workers,
    batch_size: int = DEFAULT_CONFIG.data.request_batch_size,
    batch_delay: float = DEFAULT_CONFIG.data.request_delay_seconds
) -> Tuple[Dict[str, pd.DataFrame], Dict[str, TickerMeta], Dict[str, str]]:
    """
    Fetch history and metadata for each ticker in parallel.

    Tickers are fetched in batches of ``batch_size``, pausing
    ``batch_delay`` seconds between batches to stay under the data
    source's rate limit.

    Args:
        tickers: Symbols to fetch
        provider: Data source
        timeframe: daily, weekly or monthly
        max_workers: Concurrent fetch threads
        batch_size: Tickers per batch
        batch_delay: Seconds to sleep between batches (0 disables)

    Returns:
        Tuple of (timeseries, metadata, errors), each keyed by ticker in
        input order. errors holds the message of every failed fetch.
    """
    interval = DEFAULT_CONFIG.data.timeframe_intervals[timeframe]
    period = DEFAULT_CONFIG.data.timeframe_periods[timeframe]
    batch_size = max(1, batch_size)

    fetched: Dict[str, Tuple[pd.DataFrame, TickerMeta]] = {}
    errors: Dict[str, str] = {}

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        for start in range(0, len(tickers), batch_size):
            if start and batch_delay > 0:
                logger.debug("Pausing %.1fs before fetching batch at %d", batch_delay, start)
                time.sleep(batch_delay)

            future_to_ticker = {
                executor.submit(_fetch_one, provider, ticker, period, interval): ticker
                for ticker in tickers[start:start + batch_size]
            }
            for future in as_completed(future_to_ticker):
                ticker = future_to_ticker[future]
                try:
                    fetched[ticker] = future.result()
                except DataProviderError as e:
                    logger.warning("Error fetching %s: %s", ticker, e)
                    errors[ticker] = str(e)

    timeseries = {t: fetched[t][0] for t in tickers if t in fetched}
    metadata = {t: fetched[t][1] for t in tickers if t in fetched}
    return timeseries, metadata, {t: errors[t] for t in tickers if t in errors}


def screen_tickers(
    tickers: Optional[List[str]] = None,
    params: Optional[ScreenerParams] = None,
    provider: Optional[DataProvider] = None,
    timeframe: Optional[str] = None,
    max_workers: Optional[int] = None
) -> EngineOutput:
    """
    Quick screening function for programmatic use.

    Args:
        tickers: Symbols to screen (uses config watchlist if None)
        params: Run parameters (defaults if None)
        provider: Data source (cached Yahoo Finance if None)
        timeframe: daily, weekly or monthly
        max_workers: Threads for the per-ticker screening pass

    Returns:
        EngineOutput with ranked picks

    Example:
        >>> output = screen_tickers(["NVDA", "AAPL"])
        >>> for pick in output.picks:
        ...     print(pick.ticker, pick.selection_reason)
    """
    params = params or ScreenerParams()
    if provider is None:
        provider = YFinanceProvider()
        if DEFAULT_CONFIG.data.cache_enabled:
            provider = CachedProvider(provider)
    tickers = [t.upper() for t in (tickers or DEFAULT_CONFIG.watchlist)]

    timeseries, metadata, _ = load_universe(tickers, provider, resolve_timeframe(params, timeframe))
    return run(params, timeseries, metadata, max_workers=max_workers)


def main():
    """Run the CLI application."""
    from setup_screener.cli import app
    app()


if __name__ == "__main__":
    main()
