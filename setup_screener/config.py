"""
Configuration and run parameters for the setup screener.

Holds the process-wide fixed liquidity filters, the per-run ScreenerParams
(with the nested Leo methodology settings) and the default indicator/data
configuration used by the engine and the CLI.
"""
import json
import re
from dataclasses import dataclass, field, fields, replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Tuple, Union

Trend = Literal["up", "down", "sideways"]
MACross = Literal["20>50", "50>200", "20>200", "none"]
FibReference = Literal["swing_high_to_low", "swing_low_to_high"]
FibZone = Literal["38.2-50", "50-61.8", "38.2-61.8", "extension-127", "extension-161.8", "*"]
IndexName = Literal["sp500", "dowjones", "nasdaq100", "russell2000"]
Timeframe = Literal["daily", "weekly", "monthly"]
CandlestickPattern = Literal[
    "doji",
    "hammer",
    "long_lower_shadow",
    "gravestone_doji",
    "shooting_star",
    "engulfing_bullish",
    "engulfing_bearish",
    "none",
]

TREND_TYPES = ("up", "down", "sideways", "*")
MA_CROSSES = ("20>50", "50>200", "20>200", "none")
FIB_REFERENCES = ("swing_high_to_low", "swing_low_to_high")
FIB_ZONES = ("38.2-50", "50-61.8", "38.2-61.8", "extension-127", "extension-161.8", "*")
INDEX_NAMES = ("sp500", "dowjones", "nasdaq100", "russell2000")
TIMEFRAMES = ("daily", "weekly", "monthly")
CANDLESTICK_PATTERNS = (
    "doji",
    "hammer",
    "long_lower_shadow",
    "gravestone_doji",
    "shooting_star",
    "engulfing_bullish",
    "engulfing_bearish",
    "none",
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ScreenerConfigError(ValueError):
    """Raised when screening parameters or constants are invalid."""
    pass


class FixedFiltersError(ScreenerConfigError):
    """Raised when the fixed liquidity filters differ from their required values."""
    pass


@dataclass(frozen=True)
class FixedFilters:
    """Non-configurable liquidity and price filters applied to every ticker."""
    min_price: float = 30.0              # last close must be strictly above
    min_avg_volume_20: float = 1_000_000  # 20-bar average volume, strictly above
    min_relative_volume: float = 1.0     # last volume / 20-bar average, strictly above
    min_bars: int = 250                  # bars of history required


FIXED_FILTERS = FixedFilters()

_REQUIRED_FIXED_FILTERS = {
    "min_price": 30.0,
    "min_avg_volume_20": 1_000_000,
    "min_relative_volume": 1.0,
    "min_bars": 250,
}


def assert_fixed_filters(filters: FixedFilters = FIXED_FILTERS) -> None:
    """
    Check the fixed filters against their required literal values.

    Raises:
        FixedFiltersError: If any value has drifted from the required set
    """
    for name, expected in _REQUIRED_FIXED_FILTERS.items():
        actual = getattr(filters, name, None)
        if actual != expected:
            raise FixedFiltersError(
                "FixedFilters mismatch: must be "
                "{min_price: 30, min_avg_volume_20: 1_000_000, "
                f"min_relative_volume: 1.0, min_bars: 250}} (got {name}={actual!r})"
            )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value \
        and value not in (float("inf"), float("-inf"))


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _check_bounds(name: str, low: Any, high: Any, floor: float = 0.0, ceiling: float = 100.0):
    if not (_is_number(low) and _is_number(high)):
        raise ScreenerConfigError(f"{name} bounds must be numbers")
    if not (floor <= low <= ceiling and floor <= high <= ceiling) or low > high:
        raise ScreenerConfigError(
            f"{name} bounds must be within {floor:g}-{ceiling:g} and {name}_min <= {name}_max"
        )


def validate_iso_date(value: Any, name: str = "as_of_date") -> str:
    """Return the value if it is a real ISO YYYY-MM-DD date, else raise."""
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise ScreenerConfigError(f"{name} must be ISO YYYY-MM-DD")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ScreenerConfigError(f"{name} is not a valid calendar date: {value}")
    return value


@dataclass(frozen=True)
class LeoParams:
    """Leo reversal methodology settings."""
    enabled: bool = False
    index_filters: Tuple[str, ...] = ("sp500", "dowjones", "nasdaq100")
    min_price: float = 50.0
    candlestick_patterns: Tuple[str, ...] = ("doji", "hammer", "long_lower_shadow")
    require_volume_shift: bool = True
    bb_bounce_enabled: bool = True
    stoch_oversold_threshold: float = 20.0
    stoch_overbought_threshold: float = 80.0
    earnings_warning_days: int = 30
    timeframe: str = "weekly"

    def __post_init__(self):
        for name in ("index_filters", "candlestick_patterns"):
            if not isinstance(getattr(self, name), (list, tuple)):
                raise ScreenerConfigError(f"leo.{name} must be a list of names")
        # Accept lists from callers but keep the instance hashable and immutable
        object.__setattr__(self, "index_filters", tuple(self.index_filters))
        object.__setattr__(self, "candlestick_patterns", tuple(self.candlestick_patterns))

        for flag in ("enabled", "require_volume_shift", "bb_bounce_enabled"):
            if not isinstance(getattr(self, flag), bool):
                raise ScreenerConfigError(f"leo.{flag} must be a boolean")

        unknown = [i for i in self.index_filters if i not in INDEX_NAMES]
        if unknown:
            raise ScreenerConfigError(
                f"Unknown index filter(s) {unknown}. Available: {list(INDEX_NAMES)}"
            )
        unknown = [p for p in self.candlestick_patterns if p not in CANDLESTICK_PATTERNS]
        if unknown:
            raise ScreenerConfigError(
                f"Unknown candlestick pattern(s) {unknown}. Available: {list(CANDLESTICK_PATTERNS)}"
            )
        if not _is_number(self.min_price) or self.min_price < 0:
            raise ScreenerConfigError("leo.min_price must be a non-negative number")

        oversold, overbought = self.stoch_oversold_threshold, self.stoch_overbought_threshold
        if not (_is_number(oversold) and _is_number(overbought)) \
                or not (0 <= oversold < overbought <= 100):
            raise ScreenerConfigError(
                "leo stochastic thresholds must be within 0-100 and oversold < overbought"
            )
        if isinstance(self.earnings_warning_days, bool) or not isinstance(self.earnings_warning_days, int) \
                or self.earnings_warning_days < 0:
            raise ScreenerConfigError("leo.earnings_warning_days must be a non-negative integer")
        if self.timeframe not in TIMEFRAMES:
            raise ScreenerConfigError(f'leo.timeframe must be one of {" | ".join(TIMEFRAMES)}')


@dataclass(frozen=True)
class ScreenerParams:
    """
    Full configuration for one screening run.

    Instances are immutable and validated on construction; any invalid
    combination raises ScreenerConfigError before a run can start.
    """
    user_sector: str = "*"
    user_industry: str = "*"
    market_cap_min: float = 2_000_000_000
    market_cap_max: float = 1e13
    rsi_min: float = 0.0
    rsi_max: float = 100.0
    stoch_k_min: float = 0.0
    stoch_k_max: float = 100.0
    trend_type: str = "*"
    trend_lookback: int = 60          # trading days
    ma_cross: str = "none"
    sr_proximity_pct: float = 3.0     # %
    adx_min: float = 0.0
    atr_lookback: int = 14
    fib_reference: str = "swing_low_to_high"
    fib_zone: str = "*"
    max_results: int = 50
    as_of_date: str = field(default_factory=lambda: date.today().isoformat())
    leo: LeoParams = field(default_factory=LeoParams)

    def __post_init__(self):
        validate_iso_date(self.as_of_date)

        if not isinstance(self.user_sector, str) or not isinstance(self.user_industry, str):
            raise ScreenerConfigError("user_sector and user_industry must be strings")
        if not (_is_number(self.market_cap_min) and _is_number(self.market_cap_max)):
            raise ScreenerConfigError("market cap bounds must be numbers")
        if self.market_cap_min < 0:
            raise ScreenerConfigError("market_cap_min must be non-negative")
        if self.market_cap_min > self.market_cap_max:
            raise ScreenerConfigError("market_cap_min must be <= market_cap_max")

        _check_bounds("rsi", self.rsi_min, self.rsi_max)
        _check_bounds("stoch_k", self.stoch_k_min, self.stoch_k_max)

        if not _is_positive_int(self.trend_lookback):
            raise ScreenerConfigError("trend_lookback must be a positive integer")
        if not _is_positive_int(self.max_results):
            raise ScreenerConfigError("max_results must be a positive integer")
        if not _is_positive_int(self.atr_lookback):
            raise ScreenerConfigError("atr_lookback must be a positive integer")
        if not _is_number(self.sr_proximity_pct) or self.sr_proximity_pct < 0:
            raise ScreenerConfigError("sr_proximity_pct must be a non-negative number")
        if not _is_number(self.adx_min) or self.adx_min < 0:
            raise ScreenerConfigError("adx_min must be a non-negative number")

        if self.ma_cross not in MA_CROSSES:
            raise ScreenerConfigError(f"ma_cross must be one of {' | '.join(MA_CROSSES)}")
        if self.trend_type not in TREND_TYPES:
            raise ScreenerConfigError(f"trend_type must be one of {' | '.join(TREND_TYPES)}")
        if self.fib_reference not in FIB_REFERENCES:
            raise ScreenerConfigError(f"fib_reference must be one of {' | '.join(FIB_REFERENCES)}")
        if self.fib_zone not in FIB_ZONES:
            raise ScreenerConfigError(f"fib_zone must be one of {' | '.join(FIB_ZONES)}")
        if not isinstance(self.leo, LeoParams):
            raise ScreenerConfigError("leo must be a LeoParams instance")

    @property
    def leo_mode_enabled(self) -> bool:
        return self.leo.enabled

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "ScreenerParams":
        """
        Build params from a flat mapping.

        Leo settings may be given either as a nested ``leo`` mapping or as
        ``leo_``-prefixed keys (``leo_enabled``, ``leo_min_price`` ...).
        Unknown keys are rejected.

        Raises:
            ScreenerConfigError: On unknown keys or invalid values
        """
        if not isinstance(values, Mapping):
            raise ScreenerConfigError(f"Parameters must be a mapping, got {type(values).__name__}")

        own = {f.name for f in fields(cls)} - {"leo"}
        leo_names = {f.name for f in fields(LeoParams)}

        kwargs: Dict[str, Any] = {}
        leo = values.get("leo") or {}
        if not isinstance(leo, Mapping):
            raise ScreenerConfigError(f"leo must be a mapping of Leo settings, got {type(leo).__name__}")
        leo_kwargs: Dict[str, Any] = dict(leo)
        unknown: List[str] = []

        for key, value in values.items():
            if key == "leo":
                continue
            if key in own:
                kwargs[key] = value
            elif isinstance(key, str) and key.startswith("leo_") and key[4:] in leo_names:
                leo_kwargs[key[4:]] = value
            else:
                unknown.append(key)

        bad_leo = [k for k in leo_kwargs if k not in leo_names]
        if unknown or bad_leo:
            raise ScreenerConfigError(f"Unknown parameter(s): {unknown + bad_leo}")

        return cls(leo=LeoParams(**leo_kwargs), **kwargs)

    def with_overrides(self, **changes: Any) -> "ScreenerParams":
        """Return a validated copy with some fields replaced."""
        return replace(self, **changes)


def load_params_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read run parameters from a JSON object file.

    The result is meant for ScreenerParams.from_dict; keys are not checked here.

    Raises:
        ScreenerConfigError: If the file cannot be read, is not valid JSON or
            does not hold a JSON object
    """
    path = Path(path)
    try:
        with open(path) as f:
            values = json.load(f)
    except OSError as e:
        raise ScreenerConfigError(f"Could not read parameter file {path}: {e}")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ScreenerConfigError(f"Parameter file {path} is not valid JSON: {e}")

    if not isinstance(values, dict):
        raise ScreenerConfigError(f"Parameter file {path} must contain a JSON object")
    return values


@dataclass
class IndicatorConfig:
    """Indicator window lengths used when building a ticker snapshot."""
    rsi_period: int = 14
    stoch_k_period: int = 14
    adx_period: int = 14
    bb_period: int = 20
    bb_std_multiplier: float = 2.0
    volume_window: int = 20       # average volume / 20-bar high-low
    sr_window: int = 20           # support/resistance lookback
    fib_window: int = 50          # swing range for Fibonacci levels
    volume_shift_lookback: int = 5
    fvg_lookback: int = 20
    swing_strength: int = 3       # bars on each side of a swing point


@dataclass
class DataConfig:
    """Market data settings for the CLI front end."""
    default_data_period: str = "2y"  # must cover FixedFilters.min_bars
    timeframe_intervals: dict = field(default_factory=lambda: {
        "daily": "1d",
        "weekly": "1wk",
        "monthly": "1mo"
    })
    timeframe_periods: dict = field(default_factory=lambda: {
        "daily": "2y",
        "weekly": "10y",
        "monthly": "max"
    })
    max_workers: int = 4
    request_batch_size: int = 25      # tickers fetched before pausing
    request_delay_seconds: float = 1.5  # pause between fetch batches
    cache_enabled: bool = True


@dataclass
class Config:
    """Main configuration container."""
    indicators: IndicatorConfig = field(default_factory=IndicatorConfig)
    data: DataConfig = field(default_factory=DataConfig)

    # Default watchlist (can be overridden)
    watchlist: List[str] = field(default_factory=lambda: [
        "NVDA", "AAPL", "MSFT", "AMD", "META", "AMZN", "GOOGL", "JPM"
    ])


# Global default config instance
DEFAULT_CONFIG = Config()
