"""
End-to-end tests for the screening engine.
"""
import logging

import pytest

from conftest import AS_OF, make_accumulation_frame, make_breakout_frame, make_frame, make_meta
from setup_screener.config import FixedFilters, FixedFiltersError
from setup_screener.data.models import frame_to_candles
from setup_screener.screeners.engine import (
    FIXED_FILTER,
    INDICATOR_FILTER,
    INSUFFICIENT_HISTORY,
    LEO_FILTER,
    MISSING_METADATA,
    USER_FILTER,
    ScreenerEngine,
    run,
)


def _universe(volumes):
    """Breakout tickers T0, T1, ... with the given last-bar volumes."""
    timeseries = {f"T{i}": make_breakout_frame(last_volume=v) for i, v in enumerate(volumes)}
    metadata = {ticker: make_meta(ticker) for ticker in timeseries}
    return timeseries, metadata


class TestStandardRun:

    def test_breakout_pick(self, params, breakout_frame, meta):
        output = run(params, {"TEST": breakout_frame}, {"TEST": meta})

        assert output.as_of_date == AS_OF
        assert len(output.picks) == 1
        pick = output.picks[0]
        assert pick.ticker == "TEST"
        assert pick.selection_reason == "Breakout"
        assert pick.price == pytest.approx(105.0)
        assert pick.volume == 4_200_000
        assert pick.relative_volume == pytest.approx(4_200_000 / 2_110_000)
        assert pick.rsi == pytest.approx(100.0)
        assert pick.trend == "sideways"
        assert pick.company == "TEST Inc."
        assert pick.sector == "Technology"
        assert pick.score == pytest.approx(4_200_000 / 2_110_000 * 10)
        assert str(pick) == "TEST: Breakout @ $105.00"

    def test_leo_fields_empty_in_standard_mode(self, params, breakout_frame, meta):
        pick = run(params, {"TEST": breakout_frame}, {"TEST": meta}).picks[0]
        assert pick.candlestick_pattern is None
        assert pick.bb_position is None
        assert pick.price_targets is None
        assert pick.reversal_timeline is None

    def test_output_dict_hides_score(self, params, breakout_frame, meta):
        data = run(params, {"TEST": breakout_frame}, {"TEST": meta}).to_dict()
        assert data["as_of_date"] == AS_OF
        assert "score" not in data["picks"][0]
        assert data["picks"][0]["selection_reason"] == "Breakout"

    def test_empty_universe(self, params):
        output = run(params, {}, {})
        assert output.picks == []
        assert output.as_of_date == AS_OF
        assert output.stats.universe_size == 0

    def test_candles_match_frames(self, params, breakout_frame, meta):
        from_frame = run(params, {"TEST": breakout_frame}, {"TEST": meta})
        from_candles = run(params, {"TEST": frame_to_candles(breakout_frame)}, {"TEST": meta})
        assert from_candles.to_dict() == from_frame.to_dict()

    def test_max_results_keeps_highest_scores(self, params):
        timeseries, metadata = _universe([3_500_000, 6_000_000, 4_000_000, 5_000_000, 4_500_000])
        output = run(params.with_overrides(max_results=3), timeseries, metadata)
        assert [p.ticker for p in output.picks] == ["T1", "T3", "T4"]
        assert output.stats.classified == 5
        assert output.stats.returned == 3

    def test_parallel_matches_sequential(self, params):
        timeseries, metadata = _universe([3_500_000, 6_000_000, 4_000_000, 5_000_000, 4_500_000, 4_200_000])
        timeseries["FLAT"] = make_frame([100.0] * 260)
        metadata["FLAT"] = make_meta("FLAT")

        sequential = run(params, timeseries, metadata)
        parallel = run(params, timeseries, metadata, max_workers=4)
        assert parallel.to_dict() == sequential.to_dict()
        assert parallel.stats.excluded == sequential.stats.excluded

    def test_deterministic(self, params):
        timeseries, metadata = _universe([3_500_000, 4_200_000, 5_000_000])
        assert run(params, timeseries, metadata).to_dict() == run(params, timeseries, metadata).to_dict()

    def test_ties_keep_input_order(self, params):
        timeseries, metadata = _universe([4_200_000, 4_200_000, 4_200_000])
        assert [p.ticker for p in run(params, timeseries, metadata).picks] == ["T0", "T1", "T2"]


class TestExclusions:

    def test_stage_counts(self, params):
        timeseries = {
            "OK": make_breakout_frame(),
            "NOMETA": make_breakout_frame(),
            "SHORT": make_breakout_frame(bars=100),
            "CHEAP": make_breakout_frame(base=20.0),
            "SMALL": make_breakout_frame(),
            "FLAT": make_frame([100.0] * 259 + [100.0], volumes=[2_000_000] * 259 + [2_100_000]),
        }
        metadata = {t: make_meta(t) for t in timeseries if t != "NOMETA"}
        metadata["SMALL"] = make_meta("SMALL", market_cap=1e9)
        metadata["EXTRA"] = make_meta("EXTRA")

        output = run(params.with_overrides(ma_cross="20>50"), timeseries, metadata)

        assert [p.ticker for p in output.picks] == ["OK"]
        assert output.stats.universe_size == 6
        assert output.stats.excluded == {
            MISSING_METADATA: 1,
            INSUFFICIENT_HISTORY: 1,
            FIXED_FILTER: 1,
            USER_FILTER: 1,
            INDICATOR_FILTER: 1,
        }

    def test_missing_series_counts_as_short_history(self, params, meta):
        output = run(params, {"NODATA": None}, {"NODATA": meta})
        assert output.picks == []
        assert output.stats.excluded == {INSUFFICIENT_HISTORY: 1}

    def test_exclusions_are_logged(self, params, breakout_frame, caplog):
        with caplog.at_level(logging.DEBUG, logger="setup_screener.screeners.engine"):
            run(params, {"GHOST": breakout_frame}, {})
        assert "GHOST: no metadata" in caplog.text

    def test_altered_fixed_filters_rejected(self, params, breakout_frame, meta):
        with pytest.raises(FixedFiltersError):
            ScreenerEngine(fixed_filters=FixedFilters(min_price=10.0))
        with pytest.raises(FixedFiltersError):
            run(params, {"TEST": breakout_frame}, {"TEST": meta},
                fixed_filters=FixedFilters(min_bars=100))


class TestLeoRun:

    def test_overbought_reversal_pick(self, leo_params, breakout_frame):
        output = run(leo_params, {"AAPL": breakout_frame}, {"AAPL": make_meta("AAPL")})

        assert len(output.picks) == 1
        pick = output.picks[0]
        assert pick.selection_reason == "Stoch_Overbought_Reversal"
        assert pick.score == pytest.approx(65 + (5.5 / 6 * 100 - 80))
        assert pick.candlestick_pattern == "engulfing_bullish"
        assert pick.volume_shift == "buyer"
        assert pick.bb_position == "upper_reject"
        assert pick.bb_percent_b > 1.0
        assert pick.stoch_position == "overbought"
        assert pick.stoch_k == pytest.approx(5.5 / 6 * 100)
        assert pick.entry_confirmed is True
        assert pick.earnings_warning is False
        assert pick.reversal_timeline == "3-5 candles"
        assert [t.price for t in pick.price_targets] == pytest.approx([115.5])

    def test_price_targets_serialized(self, leo_params, breakout_frame):
        data = run(leo_params, {"AAPL": breakout_frame}, {"AAPL": make_meta("AAPL")}).to_dict()
        target = data["picks"][0]["price_targets"][0]
        assert target["type"] == "percentage"
        assert target["confidence"] == 50

    def test_earnings_warning(self, leo_params, breakout_frame):
        meta = make_meta("AAPL", next_earnings_date="2024-07-10")
        pick = run(leo_params, {"AAPL": breakout_frame}, {"AAPL": meta}).picks[0]
        assert pick.earnings_warning is True
        assert pick.next_earnings_date == "2024-07-10"

    def test_index_filter_uses_injected_lookup(self, leo_params, breakout_frame):
        output = run(
            leo_params,
            {"AAPL": breakout_frame},
            {"AAPL": make_meta("AAPL")},
            index_lookup=lambda ticker, indices: False
        )
        assert output.picks == []
        assert output.stats.excluded == {LEO_FILTER: 1}

    def test_default_lookup_rejects_non_members(self, leo_params, breakout_frame):
        output = run(leo_params, {"ZZZZ": breakout_frame}, {"ZZZZ": make_meta("ZZZZ")})
        assert output.stats.excluded == {LEO_FILTER: 1}

    def test_accumulation_pick_with_targets(self, leo_params):
        output = run(leo_params, {"AAPL": make_accumulation_frame()}, {"AAPL": make_meta("AAPL")})

        assert len(output.picks) == 1
        pick = output.picks[0]
        assert pick.selection_reason == "Reversal_Accumulation"
        assert pick.score == 100.0
        assert pick.price == pytest.approx(87.6)
        assert pick.trend == "down"
        assert pick.candlestick_pattern == "hammer"
        assert pick.volume_shift == "buyer"
        assert pick.volume_shift_strength == pytest.approx((10 / 14 - 0.5) * 200)
        assert pick.bb_position == "lower_bounce"
        assert pick.bb_percent_b < 0
        assert pick.stoch_position == "oversold"
        assert pick.stoch_k == pytest.approx(2.0 / 14.4 * 100)
        assert pick.entry_confirmed is False

        targets = pick.price_targets
        assert [t.type for t in targets] == ["percentage", "swing", "swing"]
        assert [t.price for t in targets] == pytest.approx([87.6 * 1.1, 102.0, 104.0])
        assert [t.confidence for t in targets] == [50, 70, 70]
