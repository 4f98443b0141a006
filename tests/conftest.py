"""
Shared fixtures: synthetic OHLCV frames and ticker metadata.
"""
from typing import Optional, Sequence

import pandas as pd
import pytest

from setup_screener.config import LeoParams, ScreenerParams
from setup_screener.data.models import TickerMeta

AS_OF = "2024-06-28"


def make_frame(
    closes: Sequence[float],
    highs: Optional[Sequence[float]] = None,
    lows: Optional[Sequence[float]] = None,
    opens: Optional[Sequence[float]] = None,
    volumes: Optional[Sequence[float]] = None,
    end: str = AS_OF
) -> pd.DataFrame:
    """OHLCV frame on business days ending at ``end``; missing columns default to the close."""
    n = len(closes)
    df = pd.DataFrame(
        {
            'Open': list(opens) if opens is not None else list(closes),
            'High': list(highs) if highs is not None else list(closes),
            'Low': list(lows) if lows is not None else list(closes),
            'Close': list(closes),
            'Volume': list(volumes) if volumes is not None else [2_000_000] * n,
        },
        index=pd.bdate_range(end=end, periods=n),
        dtype=float,
    )
    df.index.name = 'Date'
    return df


def make_breakout_frame(
    bars: int = 261,
    base: float = 100.0,
    last_volume: float = 4_200_000,
    base_volume: float = 2_000_000
) -> pd.DataFrame:
    """
    Flat history at ``base`` followed by one bar closing 5% above the prior
    20-bar high on heavy volume.
    """
    closes = [base] * (bars - 1) + [base * 1.05]
    highs = [base] * (bars - 1) + [base * 1.055]
    lows = [base] * (bars - 1) + [base * 0.995]
    opens = [base] * bars
    volumes = [base_volume] * (bars - 1) + [last_volume]
    return make_frame(closes, highs, lows, opens, volumes)


def make_accumulation_frame(bars: int = 260) -> pd.DataFrame:
    """
    Flat history at 100 with two older spikes (highs 102 and 104), then four
    falling candles on light volume and a heavy-volume hammer at the lows.
    """
    flat = bars - 5
    opens = [100.0] * flat + [100.0, 97.0, 94.0, 91.0, 87.0]
    closes = [100.0] * flat + [97.0, 94.0, 91.0, 88.0, 87.6]
    highs = [100.0] * flat + [100.0, 97.0, 94.0, 91.0, 87.7]
    lows = [100.0] * flat + [97.0, 94.0, 91.0, 88.0, 85.6]
    volumes = [2_000_000] * flat + [1_000_000] * 4 + [10_000_000]
    highs[flat - 55] = 102.0
    highs[flat - 25] = 104.0
    return make_frame(closes, highs, lows, opens, volumes)


def make_meta(ticker: str = "TEST", **overrides) -> TickerMeta:
    values = dict(
        ticker=ticker,
        company=f"{ticker} Inc.",
        sector="Technology",
        industry="Semiconductors",
        market_cap=5e9,
        next_earnings_date=None,
        last_completed_bar=AS_OF,
    )
    values.update(overrides)
    return TickerMeta(**values)


@pytest.fixture
def params() -> ScreenerParams:
    return ScreenerParams(as_of_date=AS_OF)


@pytest.fixture
def leo_params() -> ScreenerParams:
    return ScreenerParams(as_of_date=AS_OF, leo=LeoParams(enabled=True))


@pytest.fixture
def breakout_frame() -> pd.DataFrame:
    return make_breakout_frame()


@pytest.fixture
def meta() -> TickerMeta:
    return make_meta()
