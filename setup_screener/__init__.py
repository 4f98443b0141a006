"""
Setup Screener - technical setup screening and classification for equities.
"""
from setup_screener.config import (
    DEFAULT_CONFIG,
    FIXED_FILTERS,
    FixedFilters,
    FixedFiltersError,
    LeoParams,
    ScreenerConfigError,
    ScreenerParams
)
from setup_screener.screeners import ClassifiedPick, EngineOutput, ScreenerEngine, run

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "FIXED_FILTERS",
    "FixedFilters",
    "FixedFiltersError",
    "LeoParams",
    "ScreenerConfigError",
    "ScreenerParams",
    "ClassifiedPick",
    "EngineOutput",
    "ScreenerEngine",
    "run"
]
