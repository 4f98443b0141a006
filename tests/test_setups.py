"""
Tests for setup classification: standard rule order, Leo rule order and scores.
"""
import pytest

from conftest import AS_OF, make_frame
from setup_screener.config import LeoParams, ScreenerParams
from setup_screener.indicators.snapshot import Indicators
from setup_screener.screeners.setups import (
    LEO_RULES,
    STANDARD_RULES,
    classify_setup,
    leo_reversal_score,
)


@pytest.fixture
def flat_df():
    return make_frame([100.0] * 5)


def _leo(**overrides):
    return ScreenerParams(as_of_date=AS_OF, leo=LeoParams(enabled=True, **overrides))


class TestRuleTables:

    def test_standard_order(self):
        assert [r.reason for r in STANDARD_RULES] == [
            "Breakout", "Momentum", "Fib Pullback", "Pullback", "Consolidation", "Reversal"
        ]

    def test_leo_order(self):
        assert [r.reason for r in LEO_RULES] == [
            "Reversal_Accumulation",
            "BB_Lower_Bounce",
            "Stoch_Oversold_Reversal",
            "Reversal_Distribution",
            "BB_Upper_Reject",
            "Stoch_Overbought_Reversal",
        ]


class TestStandardSetups:

    def test_breakout(self, params):
        df = make_frame([100.0] * 4 + [105.0], volumes=[2_000_000] * 4 + [4_200_000])
        ind = Indicators(hh20=100.0, ll20=95.0, avg_vol20=2_110_000)
        match = classify_setup(df, ind, params)
        assert match.reason == "Breakout"
        assert match.score == pytest.approx(4_200_000 / 2_110_000 * 10)

    def test_breakout_needs_volume(self, params):
        df = make_frame([100.0] * 4 + [105.0], volumes=[2_000_000] * 4 + [3_000_000])
        ind = Indicators(hh20=100.0, ll20=95.0, avg_vol20=2_110_000)
        assert classify_setup(df, ind, params) is None

    def test_breakout_score_capped(self, params):
        df = make_frame([100.0] * 4 + [105.0], volumes=[1_000_000] * 4 + [50_000_000])
        ind = Indicators(hh20=100.0, ll20=95.0, avg_vol20=1_000_000)
        assert classify_setup(df, ind, params).score == 100.0

    def test_breakout_wins_over_momentum(self, params):
        df = make_frame([100.0] * 4 + [105.0], volumes=[2_000_000] * 4 + [4_200_000])
        ind = Indicators(hh20=100.0, ll20=95.0, avg_vol20=2_110_000, rsi14=70.0, adx14=30.0, trend="up")
        assert classify_setup(df, ind, params).reason == "Breakout"

    def test_momentum(self, flat_df, params):
        ind = Indicators(rsi14=65.0, adx14=30.0, trend="up")
        match = classify_setup(flat_df, ind, params)
        assert match.reason == "Momentum"
        assert match.score == pytest.approx(45.0)

    def test_momentum_needs_uptrend(self, flat_df, params):
        ind = Indicators(rsi14=65.0, adx14=30.0, trend="sideways")
        assert classify_setup(flat_df, ind, params) is None

    def test_pullback(self, params):
        ind = Indicators(sma20=100.0, rsi14=40.0, trend="up")
        match = classify_setup(make_frame([101.0] * 5), ind, params)
        assert match.reason == "Pullback"
        assert match.score == pytest.approx(109.0)

    def test_fib_pullback_checked_before_pullback(self, params):
        ind = Indicators(sma20=100.0, rsi14=40.0, trend="up", fib_hit=True, reaction_bullish=True)
        match = classify_setup(make_frame([101.0] * 5), ind, params)
        assert match.reason == "Fib Pullback"
        assert match.score == pytest.approx(109.0 * 1.2)

    def test_fib_hit_without_reaction_is_plain_pullback(self, params):
        ind = Indicators(sma20=100.0, rsi14=40.0, trend="up", fib_hit=True, reaction_bullish=False)
        assert classify_setup(make_frame([101.0] * 5), ind, params).reason == "Pullback"

    def test_consolidation(self, flat_df, params):
        ind = Indicators(bb_width=0.05, adx14=15.0)
        match = classify_setup(flat_df, ind, params)
        assert match.reason == "Consolidation"
        assert match.score == pytest.approx(85.0)

    def test_reversal(self, flat_df, params):
        ind = Indicators(rsi14=25.0, trend="down", sr_distance_pct=1.0)
        match = classify_setup(flat_df, ind, params)
        assert match.reason == "Reversal"
        assert match.score == pytest.approx(95.0)

    def test_reversal_needs_nearby_level(self, flat_df, params):
        ind = Indicators(rsi14=25.0, trend="down", sr_distance_pct=2.0)
        assert classify_setup(flat_df, ind, params) is None

    def test_no_indicators_no_setup(self, flat_df, params):
        assert classify_setup(flat_df, Indicators(), params) is None


class TestLeoSetups:

    @pytest.fixture
    def bullish(self):
        return Indicators(
            bb_percent_b=0.05,
            stoch_k=10.0,
            candlestick_pattern="hammer",
            volume_shift="buyer",
            volume_shift_strength=60.0,
            entry_confirmed=False,
        )

    @pytest.fixture
    def bearish(self):
        return Indicators(
            bb_percent_b=0.95,
            stoch_k=90.0,
            candlestick_pattern="shooting_star",
            volume_shift="seller",
            volume_shift_strength=50.0,
            entry_confirmed=False,
        )

    def test_reversal_accumulation(self, flat_df, leo_params, bullish):
        match = classify_setup(flat_df, bullish, leo_params)
        assert match.reason == "Reversal_Accumulation"
        # 70 + (0.2 - 0.05) * 50 + (30 - 10) / 2 + 60 * 0.2
        assert match.score == pytest.approx(99.5)

    def test_accumulation_score_capped(self, flat_df, leo_params, bullish):
        bullish.entry_confirmed = True
        assert classify_setup(flat_df, bullish, leo_params).score == 100.0

    def test_neutral_volume_gives_bb_lower_bounce(self, flat_df, leo_params, bullish):
        bullish.volume_shift = "neutral"
        match = classify_setup(flat_df, bullish, leo_params)
        assert match.reason == "BB_Lower_Bounce"
        assert match.score == pytest.approx(170.0)

    def test_weak_volume_shift_needs_strength(self, flat_df, leo_params, bullish):
        bullish.volume_shift_strength = 20.0
        assert classify_setup(flat_df, bullish, leo_params).reason == "BB_Lower_Bounce"

    def test_volume_strength_not_required(self, flat_df, bullish):
        bullish.volume_shift_strength = 20.0
        params = _leo(require_volume_shift=False)
        assert classify_setup(flat_df, bullish, params).reason == "Reversal_Accumulation"

    def test_bb_bounce_disabled_falls_to_stochastic(self, flat_df, bullish):
        bullish.volume_shift = "neutral"
        match = classify_setup(flat_df, bullish, _leo(bb_bounce_enabled=False))
        assert match.reason == "Stoch_Oversold_Reversal"
        assert match.score == pytest.approx(75.0)

    def test_pattern_outside_allow_list(self, flat_df, leo_params, bullish):
        bullish.candlestick_pattern = "engulfing_bullish"
        assert classify_setup(flat_df, bullish, leo_params).reason == "Stoch_Oversold_Reversal"

    def test_empty_allow_list_accepts_any_pattern(self, flat_df, bullish):
        bullish.candlestick_pattern = "engulfing_bullish"
        match = classify_setup(flat_df, bullish, _leo(candlestick_patterns=()))
        assert match.reason == "Reversal_Accumulation"

    def test_reversal_distribution(self, flat_df, bearish):
        match = classify_setup(flat_df, bearish, _leo(candlestick_patterns=("shooting_star",)))
        assert match.reason == "Reversal_Distribution"
        # 70 + (0.95 - 0.8) * 50 + (90 - 70) / 2 + 50 * 0.2
        assert match.score == pytest.approx(97.5)

    def test_bb_upper_reject(self, flat_df, bearish):
        bearish.volume_shift = "neutral"
        match = classify_setup(flat_df, bearish, _leo(candlestick_patterns=("shooting_star",)))
        assert match.reason == "BB_Upper_Reject"
        assert match.score == pytest.approx(75 + 0.15 * 500)

    def test_bearish_pattern_not_allowed_by_default(self, flat_df, leo_params, bearish):
        match = classify_setup(flat_df, bearish, leo_params)
        assert match.reason == "Stoch_Overbought_Reversal"
        assert match.score == pytest.approx(75.0)

    def test_stochastic_reversal_uses_fixed_extremes(self, flat_df):
        """A looser oversold threshold widens the zone but not the %K < 20 check."""
        ind = Indicators(bb_percent_b=0.1, stoch_k=25.0, candlestick_pattern="none")
        assert classify_setup(flat_df, ind, _leo(stoch_oversold_threshold=30.0)) is None

    def test_falls_back_to_standard_rules(self, flat_df, leo_params):
        ind = Indicators(bb_percent_b=0.5, stoch_k=50.0, rsi14=65.0, adx14=30.0, trend="up")
        assert classify_setup(flat_df, ind, leo_params).reason == "Momentum"

    def test_leo_rules_ignored_when_disabled(self, flat_df, params, bullish):
        assert classify_setup(flat_df, bullish, params) is None


class TestLeoReversalScore:

    def test_missing_values_use_base(self):
        assert leo_reversal_score(Indicators(), "bullish") == 70.0

    def test_entry_confirmation_bonus(self):
        assert leo_reversal_score(Indicators(entry_confirmed=True), "bearish") == 80.0
