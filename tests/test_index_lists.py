"""
Tests for index membership lookups.
"""
import pytest

from setup_screener.data.index_lists import (
    INDEX_CONSTITUENTS,
    filter_by_indices,
    get_index_display_name,
    get_index_tickers,
    is_ticker_in_indices,
    normalize_ticker,
)


class TestIndexLists:

    @pytest.mark.parametrize("name", list(INDEX_CONSTITUENTS))
    def test_constituents_unique(self, name):
        tickers = INDEX_CONSTITUENTS[name]
        assert len(set(tickers)) == len(tickers)

    def test_dow_has_thirty(self):
        assert len(INDEX_CONSTITUENTS['dowjones']) == 30

    def test_normalize_ticker(self):
        assert normalize_ticker(" brk.b ") == "BRK-B"

    def test_membership(self):
        assert is_ticker_in_indices("AAPL", ["dowjones"])
        assert is_ticker_in_indices("tsla", ["dowjones", "nasdaq100"])
        assert not is_ticker_in_indices("TSLA", ["dowjones"])

    def test_share_class_spelling(self):
        assert is_ticker_in_indices("BRK.B", ["sp500"])
        assert is_ticker_in_indices("BRK-B", ["sp500"])

    def test_empty_selection_passes_everything(self):
        assert is_ticker_in_indices("ZZZZ", [])

    def test_unknown_index(self):
        with pytest.raises(ValueError, match="Unknown index"):
            is_ticker_in_indices("AAPL", ["ftse100"])
        with pytest.raises(ValueError):
            get_index_tickers("ftse100")

    def test_filter_by_indices_keeps_input_order(self):
        assert filter_by_indices(["ZZZZ", "msft", "AAPL", "TSLA"], ["dowjones"]) == ["msft", "AAPL"]
        assert filter_by_indices(["ZZZZ"], []) == ["ZZZZ"]

    def test_all_indices_union(self):
        tickers = get_index_tickers("*")
        assert len(tickers) == len(set(tickers))
        assert tickers[0] == "AAPL"
        for constituents in INDEX_CONSTITUENTS.values():
            assert set(constituents) <= set(tickers)

    def test_display_names(self):
        assert get_index_display_name("sp500") == "S&P 500"
        assert get_index_display_name("nope") == "Unknown"
