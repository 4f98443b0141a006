"""
Mock data provider for tests, demos and offline screening.

Generates realistic-looking price data and ticker metadata without network
access. Output is deterministic for a given (seed, ticker, period, interval,
end date), independent of call order.
"""
import zlib
from datetime import date, timedelta
from typing import Optional, Union

import numpy as np
import pandas as pd

from setup_screener.data.models import TickerMeta
from setup_screener.data.provider import DataProvider, DataProviderError

BARS_PER_YEAR = {"1d": 252, "1wk": 52, "1mo": 12}
DATE_FREQ = {"1d": "B", "1wk": "W-FRI", "1mo": "BME"}
PERIOD_YEARS = {
    "1mo": 1 / 12,
    "3mo": 0.25,
    "6mo": 0.5,
    "1y": 1,
    "2y": 2,
    "5y": 5,
    "10y": 10,
    "max": 25,
}


class MockDataProvider(DataProvider):
    """
    Mock data provider that generates synthetic price data.

    Prices follow geometric Brownian motion with simple volatility
    clustering; volume rises on volatile bars.
    """

    # Preset characteristics for common tickers
    TICKER_PROFILES = {
        "NVDA": {"base_price": 140.0, "annual_vol": 0.55, "drift": 0.15,
                 "company": "NVIDIA Corporation", "sector": "Technology",
                 "industry": "Semiconductors", "market_cap": 3.4e12},
        "TSLA": {"base_price": 250.0, "annual_vol": 0.60, "drift": 0.10,
                 "company": "Tesla, Inc.", "sector": "Consumer Cyclical",
                 "industry": "Auto Manufacturers", "market_cap": 8.0e11},
        "AAPL": {"base_price": 195.0, "annual_vol": 0.25, "drift": 0.08,
                 "company": "Apple Inc.", "sector": "Technology",
                 "industry": "Consumer Electronics", "market_cap": 3.5e12},
        "AMD": {"base_price": 120.0, "annual_vol": 0.50, "drift": 0.12,
                "company": "Advanced Micro Devices, Inc.", "sector": "Technology",
                "industry": "Semiconductors", "market_cap": 2.0e11},
        "META": {"base_price": 520.0, "annual_vol": 0.40, "drift": 0.10,
                 "company": "Meta Platforms, Inc.", "sector": "Communication Services",
                 "industry": "Internet Content & Information", "market_cap": 1.4e12},
        "MSFT": {"base_price": 420.0, "annual_vol": 0.22, "drift": 0.07,
                 "company": "Microsoft Corporation", "sector": "Technology",
                 "industry": "Software - Infrastructure", "market_cap": 3.1e12},
        "GOOGL": {"base_price": 175.0, "annual_vol": 0.28, "drift": 0.08,
                  "company": "Alphabet Inc.", "sector": "Communication Services",
                  "industry": "Internet Content & Information", "market_cap": 2.1e12},
        "AMZN": {"base_price": 200.0, "annual_vol": 0.35, "drift": 0.09,
                 "company": "Amazon.com, Inc.", "sector": "Consumer Cyclical",
                 "industry": "Internet Retail", "market_cap": 2.0e12},
        "JPM": {"base_price": 210.0, "annual_vol": 0.24, "drift": 0.07,
                "company": "JPMorgan Chase & Co.", "sector": "Financial Services",
                "industry": "Banks - Diversified", "market_cap": 6.0e11},
        "XOM": {"base_price": 115.0, "annual_vol": 0.26, "drift": 0.04,
                "company": "Exxon Mobil Corporation", "sector": "Energy",
                "industry": "Oil & Gas Integrated", "market_cap": 5.0e11},
    }

    DEFAULT_PROFILE = {"base_price": 100.0, "annual_vol": 0.30, "drift": 0.05,
                       "company": None, "sector": "Technology",
                       "industry": "Software - Application", "market_cap": 2.5e10}

    def __init__(self, seed: Optional[int] = 42, end_date: Optional[Union[str, date]] = None):
        """
        Args:
            seed: Base random seed, combined with the ticker symbol
            end_date: Last bar date (ISO string or date); defaults to today
        """
        self.seed = seed
        if isinstance(end_date, str):
            end_date = date.fromisoformat(end_date)
        self.end_date = end_date or date.today()

    def _get_profile(self, ticker: str) -> dict:
        return self.TICKER_PROFILES.get(ticker.upper(), self.DEFAULT_PROFILE)

    def _rng(self, ticker: str) -> np.random.Generator:
        if self.seed is None:
            return np.random.default_rng()
        return np.random.default_rng([self.seed, zlib.crc32(ticker.upper().encode())])

    def _generate_ohlcv(
        self,
        rng: np.random.Generator,
        bars: int,
        interval: str,
        base_price: float,
        annual_vol: float,
        drift: float
    ) -> pd.DataFrame:
        """
        Generate synthetic OHLCV data using geometric Brownian motion.
        """
        per_year = BARS_PER_YEAR[interval]
        bar_vol = annual_vol / np.sqrt(per_year)
        bar_drift = drift / per_year

        vol_persistence = 0.9
        vol_shock = 0.3
        vol_state = bar_vol

        closes = [base_price]
        highs = [base_price * 1.01]
        lows = [base_price * 0.99]
        opens = [base_price]
        volumes = [int(10_000_000 * rng.uniform(0.5, 1.5))]

        for _ in range(bars - 1):
            # simple GARCH-like volatility state
            vol_state = vol_persistence * vol_state + \
                (1 - vol_persistence) * bar_vol + \
                vol_shock * bar_vol * abs(rng.standard_normal())

            ret = bar_drift + vol_state * rng.standard_normal()
            prev_close = closes[-1]
            new_close = prev_close * (1 + ret)

            gap = rng.uniform(-0.005, 0.005)
            new_open = prev_close * (1 + gap)

            intraday_range = vol_state * 1.5
            new_high = max(new_open, new_close) * (1 + abs(rng.standard_normal()) * intraday_range)
            new_low = min(new_open, new_close) * (1 - abs(rng.standard_normal()) * intraday_range)

            opens.append(new_open)
            highs.append(new_high)
            lows.append(new_low)
            closes.append(new_close)

            vol_multiplier = 1 + 2 * (vol_state / bar_vol - 1)
            volumes.append(int(10_000_000 * vol_multiplier * rng.uniform(0.5, 1.5)))

        dates = pd.date_range(end=pd.Timestamp(self.end_date), periods=bars, freq=DATE_FREQ[interval])
        df = pd.DataFrame({
            'Open': opens,
            'High': highs,
            'Low': lows,
            'Close': closes,
            'Volume': volumes
        }, index=dates)
        df.index.name = 'Date'
        return df

    def get_ohlcv(
        self,
        ticker: str,
        period: str = "2y",
        interval: str = "1d"
    ) -> pd.DataFrame:
        """
        Generate synthetic OHLCV data for a ticker.

        Args:
            ticker: Stock symbol
            period: One of 1mo, 3mo, 6mo, 1y, 2y, 5y, 10y, max
            interval: 1d, 1wk or 1mo

        Raises:
            DataProviderError: For an unsupported period or interval
        """
        if interval not in BARS_PER_YEAR:
            raise DataProviderError(f"Mock provider does not support interval '{interval}'")
        if period not in PERIOD_YEARS:
            raise DataProviderError(f"Mock provider does not support period '{period}'")

        bars = max(int(round(PERIOD_YEARS[period] * BARS_PER_YEAR[interval])), 2)
        profile = self._get_profile(ticker)

        return self._generate_ohlcv(
            rng=self._rng(ticker),
            bars=bars,
            interval=interval,
            base_price=profile["base_price"],
            annual_vol=profile["annual_vol"],
            drift=profile["drift"]
        )

    def get_ticker_meta(self, ticker: str) -> TickerMeta:
        """Profile metadata; earnings fall on a ticker-dependent day within ~3 months."""
        profile = self._get_profile(ticker)
        earnings_offset = zlib.crc32(ticker.upper().encode()) % 90
        return TickerMeta(
            ticker=ticker.upper(),
            company=profile["company"] or f"{ticker.upper()} Corp.",
            sector=profile["sector"],
            industry=profile["industry"],
            market_cap=profile["market_cap"],
            next_earnings_date=(self.end_date + timedelta(days=earnings_offset)).isoformat(),
            last_completed_bar=self.end_date.isoformat(),
        )

    def get_current_price(self, ticker: str) -> float:
        """Get the most recent (simulated) price."""
        df = self.get_ohlcv(ticker, period="1y")
        return float(df['Close'].iloc[-1])


def get_mock_data(ticker: str, period: str = "2y", seed: int = 42) -> pd.DataFrame:
    """Quick helper to get mock data."""
    return MockDataProvider(seed=seed).get_ohlcv(ticker, period)
