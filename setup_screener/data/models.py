"""
Candle and ticker metadata records exchanged with data providers.

Providers and the engine work on per-ticker DataFrames with the columns
Open, High, Low, Close, Volume and an ascending DatetimeIndex. Candle is the
plain record form of one row, used by importers and callers that do not
hold pandas objects.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

import pandas as pd

OHLCV_COLUMNS = ['Open', 'High', 'Low', 'Close', 'Volume']


@dataclass(frozen=True)
class Candle:
    """One trading session."""
    date: str  # ISO date (session close)
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class TickerMeta:
    """Static facts about a symbol, owned by the data source."""
    ticker: str
    company: Optional[str] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    market_cap: Optional[float] = None         # USD
    next_earnings_date: Optional[str] = None   # ISO YYYY-MM-DD
    last_completed_bar: Optional[str] = None   # ISO date


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """
    Convert a candle sequence to an OHLCV DataFrame.

    Args:
        candles: Candles ordered ascending by date

    Returns:
        DataFrame with OHLCV columns indexed by date
    """
    df = pd.DataFrame(
        {
            'Open': [c.open for c in candles],
            'High': [c.high for c in candles],
            'Low': [c.low for c in candles],
            'Close': [c.close for c in candles],
            'Volume': [c.volume for c in candles],
        },
        index=pd.to_datetime([c.date for c in candles]),
        dtype=float,
    )
    df.index.name = 'Date'
    return df


def frame_to_candles(df: pd.DataFrame) -> List[Candle]:
    """Convert an OHLCV DataFrame back to candles."""
    return [
        Candle(
            date=pd.Timestamp(ts).date().isoformat(),
            open=float(row.Open),
            high=float(row.High),
            low=float(row.Low),
            close=float(row.Close),
            volume=float(row.Volume),
        )
        for ts, row in zip(df.index, df[OHLCV_COLUMNS].itertuples(index=False))
    ]


def bar_date(df: pd.DataFrame, position: int) -> str:
    """ISO date of the bar at ``position`` (falls back to str() for non-date indexes)."""
    label = df.index[position]
    if isinstance(df.index, pd.DatetimeIndex):
        return label.date().isoformat()
    return str(label)
