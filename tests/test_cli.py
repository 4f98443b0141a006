"""
Tests for the command-line interface, run against simulated or CSV data.
"""
import json

import pytest
from typer.testing import CliRunner

from conftest import make_breakout_frame
from setup_screener.cli import app
from setup_screener.data import CacheManager, MockDataProvider

runner = CliRunner()


def _json_from(stdout: str) -> dict:
    return json.loads(stdout[stdout.index("{"):])


def _write_breakout_csv(path, ticker="AAPL"):
    df = make_breakout_frame()
    lines = ["Ticker,Date,Open,High,Low,Close,Volume,Company,Sector,Market Cap"]
    for ts, row in df.iterrows():
        lines.append(
            f"{ticker},{ts.date().isoformat()},{row.Open},{row.High},{row.Low},{row.Close},"
            f"{int(row.Volume)},Apple Inc.,Technology,3000000000000"
        )
    path.write_text("\n".join(lines) + "\n")
    return path


class TestIndicesCommand:

    def test_lists_indices(self):
        result = runner.invoke(app, ["indices"])
        assert result.exit_code == 0
        assert "sp500" in result.stdout
        assert "Dow Jones 30" in result.stdout


class TestScreenCommand:

    def test_mock_json(self):
        result = runner.invoke(app, ["screen", "NVDA", "AAPL", "--mock", "--json", "--as-of", "2024-06-28"])
        assert result.exit_code == 0
        data = _json_from(result.stdout)
        assert data["as_of_date"] == "2024-06-28"
        assert isinstance(data["picks"], list)
        assert all("score" not in pick for pick in data["picks"])

    def test_csv_breakout(self, tmp_path):
        path = _write_breakout_csv(tmp_path / "export.csv")
        result = runner.invoke(app, ["screen", "--csv", str(path), "--json"])
        assert result.exit_code == 0
        data = _json_from(result.stdout)
        assert data["as_of_date"] == "2024-06-28"
        assert [p["ticker"] for p in data["picks"]] == ["AAPL"]
        assert data["picks"][0]["selection_reason"] == "Breakout"

    def test_csv_table_output(self, tmp_path):
        path = _write_breakout_csv(tmp_path / "export.csv")
        result = runner.invoke(app, ["screen", "--csv", str(path)])
        assert result.exit_code == 0
        assert "AAPL" in result.stdout
        assert "Breakout" in result.stdout

    def test_invalid_params_exit_1(self, tmp_path):
        path = _write_breakout_csv(tmp_path / "export.csv")
        result = runner.invoke(app, ["screen", "--csv", str(path), "--rsi-min", "80", "--rsi-max", "20"])
        assert result.exit_code == 1
        assert "Invalid parameters" in result.stdout

    def test_invalid_timeframe_exit_1(self):
        result = runner.invoke(app, ["screen", "--mock", "--timeframe", "hourly"])
        assert result.exit_code == 1

    def test_unknown_index_exit_1(self):
        result = runner.invoke(app, ["screen", "--mock", "--index", "ftse100"])
        assert result.exit_code == 1
        assert "Unknown index" in result.stdout

    def test_bad_csv_exit_1(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("Ticker,Date\nAAPL,2024-06-28\n")
        result = runner.invoke(app, ["screen", "--csv", str(path)])
        assert result.exit_code == 1


class TestScreenParameters:

    @pytest.fixture
    def csv_path(self, tmp_path):
        return _write_breakout_csv(tmp_path / "export.csv")

    def _picks(self, args):
        result = runner.invoke(app, ["screen", *args, "--json"])
        assert result.exit_code == 0, result.stdout
        return _json_from(result.stdout)["picks"]

    def test_market_cap_option(self, csv_path):
        assert self._picks(["--csv", str(csv_path), "--market-cap-min", "4e12"]) == []
        assert len(self._picks(["--csv", str(csv_path), "--market-cap-max", "4e12"])) == 1

    def test_stochastic_options(self, csv_path):
        assert self._picks(["--csv", str(csv_path), "--stoch-max", "50"]) == []
        assert len(self._picks(["--csv", str(csv_path), "--stoch-min", "90"])) == 1

    def test_sr_proximity_option(self, csv_path):
        # the breakout closes about 0.48% below its own high
        assert self._picks(["--csv", str(csv_path), "--sr-proximity", "0.1"]) == []

    def test_leo_options(self, csv_path):
        picks = self._picks(["--csv", str(csv_path), "--leo", "--leo-index", "dowjones"])
        assert picks[0]["selection_reason"] == "Stoch_Overbought_Reversal"
        assert self._picks(["--csv", str(csv_path), "--leo", "--leo-index", "russell2000"]) == []

    def test_params_file(self, csv_path, tmp_path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"market_cap_min": 4e12, "max_results": 5}))
        assert self._picks(["--csv", str(csv_path), "--params", str(path)]) == []

    def test_options_override_params_file(self, csv_path, tmp_path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"market_cap_min": 4e12}))
        picks = self._picks(["--csv", str(csv_path), "--params", str(path), "--market-cap-min", "1e12"])
        assert [p["ticker"] for p in picks] == ["AAPL"]

    def test_params_file_nested_leo(self, csv_path, tmp_path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"leo": {"enabled": True, "index_filters": ["dowjones"]}}))
        picks = self._picks(["--csv", str(csv_path), "--params", str(path)])
        assert picks[0]["selection_reason"] == "Stoch_Overbought_Reversal"
        assert picks[0]["price_targets"]

        picks = self._picks(["--csv", str(csv_path), "--params", str(path), "--no-leo"])
        assert picks[0]["selection_reason"] == "Breakout"

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"min_rsi": 30}', '{"leo": true}'])
    def test_bad_params_file_exit_1(self, csv_path, tmp_path, content):
        path = tmp_path / "params.json"
        path.write_text(content)
        result = runner.invoke(app, ["screen", "--csv", str(csv_path), "--params", str(path)])
        assert result.exit_code == 1
        assert "Invalid parameters" in result.stdout

    def test_missing_params_file_exit_1(self, csv_path, tmp_path):
        result = runner.invoke(app, ["screen", "--csv", str(csv_path), "--params", str(tmp_path / "nope.json")])
        assert result.exit_code == 1


class TestScreenCaching:

    @pytest.fixture
    def cache(self, tmp_path, monkeypatch):
        cache = CacheManager(tmp_path / "cache")
        monkeypatch.setattr("setup_screener.data.cached_provider.get_cache", lambda: cache)
        monkeypatch.setattr(
            "setup_screener.cli.YFinanceProvider",
            lambda: MockDataProvider(seed=42, end_date="2024-06-28")
        )
        return cache

    def test_fetches_are_cached(self, cache):
        args = ["screen", "NVDA", "--json", "--as-of", "2024-06-28"]
        first = runner.invoke(app, args)
        second = runner.invoke(app, args)

        assert first.exit_code == second.exit_code == 0
        assert _json_from(first.stdout) == _json_from(second.stdout)
        assert cache.sets == 2  # history + metadata
        assert cache.hits == 2

    def test_no_cache_option(self, cache):
        result = runner.invoke(app, ["screen", "NVDA", "--json", "--as-of", "2024-06-28", "--no-cache"])
        assert result.exit_code == 0
        assert cache.get_stats()["total_entries"] == 0


class TestInspectCommand:

    def test_mock_snapshot(self):
        result = runner.invoke(app, ["inspect", "nvda", "--mock"])
        assert result.exit_code == 0
        assert "NVDA" in result.stdout
        assert "RSI(14)" in result.stdout
        assert "Pattern" in result.stdout

    def test_without_leo(self):
        result = runner.invoke(app, ["inspect", "NVDA", "--mock", "--no-leo"])
        assert result.exit_code == 0
        assert "Pattern" not in result.stdout
