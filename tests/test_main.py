"""
Tests for universe loading and the library entry point.
"""
import pytest

from conftest import make_breakout_frame, make_meta
from setup_screener.data import DataProvider, DataProviderError
from setup_screener.main import load_universe, resolve_timeframe, screen_tickers


class RecordingProvider(DataProvider):
    """Returns the breakout frame for every ticker except those listed as failing."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.requests = []

    def get_ohlcv(self, ticker, period="2y", interval="1d"):
        self.requests.append((ticker, period, interval))
        if ticker in self.failing:
            raise DataProviderError(f"No data found for {ticker}")
        return make_breakout_frame()

    def get_ticker_meta(self, ticker):
        return make_meta(ticker)

    def get_current_price(self, ticker):
        return 105.0


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr("setup_screener.main.time.sleep", calls.append)
    return calls


class TestLoadUniverse:

    def test_results_in_input_order(self, sleeps):
        tickers = ["MSFT", "AAPL", "NVDA", "AMD"]
        timeseries, metadata, errors = load_universe(tickers, RecordingProvider(), max_workers=4)
        assert list(timeseries) == tickers
        assert list(metadata) == tickers
        assert errors == {}

    def test_failures_reported_not_raised(self, sleeps):
        timeseries, metadata, errors = load_universe(
            ["AAPL", "BAD", "MSFT"], RecordingProvider(failing=["BAD"])
        )
        assert list(timeseries) == ["AAPL", "MSFT"]
        assert errors == {"BAD": "No data found for BAD"}

    def test_timeframe_selects_interval_and_period(self, sleeps):
        provider = RecordingProvider()
        load_universe(["AAPL"], provider, timeframe="weekly")
        assert provider.requests == [("AAPL", "10y", "1wk")]

    def test_pauses_between_batches(self, sleeps):
        tickers = [f"T{i}" for i in range(7)]
        timeseries, _, _ = load_universe(
            tickers, RecordingProvider(), max_workers=2, batch_size=3, batch_delay=1.5
        )
        assert len(timeseries) == 7
        assert sleeps == [1.5, 1.5]

    def test_single_batch_never_sleeps(self, sleeps):
        load_universe(["AAPL", "MSFT"], RecordingProvider(), batch_size=25, batch_delay=1.5)
        assert sleeps == []

    def test_zero_delay_disables_pause(self, sleeps):
        load_universe([f"T{i}" for i in range(5)], RecordingProvider(), batch_size=1, batch_delay=0)
        assert sleeps == []


class TestScreenTickers:

    def test_screens_with_given_provider(self, params, sleeps):
        output = screen_tickers(["aapl"], params=params, provider=RecordingProvider())
        assert [p.ticker for p in output.picks] == ["AAPL"]
        assert output.picks[0].selection_reason == "Breakout"

    def test_leo_mode_defaults_to_weekly(self, leo_params):
        assert resolve_timeframe(leo_params) == "weekly"
        assert resolve_timeframe(leo_params, "daily") == "daily"
