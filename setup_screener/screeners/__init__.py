"""
Screening pipeline: filters, setup classification, ranking, price targets
and the engine that runs them over a universe.
"""
from setup_screener.screeners.filters import (
    passes_fixed_filters,
    passes_user_filters,
    passes_leo_filters,
    passes_indicator_filters
)
from setup_screener.screeners.setups import (
    SetupReason,
    SetupRule,
    SetupMatch,
    STANDARD_RULES,
    LEO_RULES,
    classify_setup
)
from setup_screener.screeners.ranking import (
    STANDARD_PRIORITY,
    LEO_PRIORITY,
    priority_order,
    rank_and_cap
)
from setup_screener.screeners.price_targets import PriceTarget, calculate_price_targets
from setup_screener.screeners.engine import (
    ClassifiedPick,
    ScreenStats,
    EngineOutput,
    ScreenerEngine,
    run
)

__all__ = [
    'passes_fixed_filters',
    'passes_user_filters',
    'passes_leo_filters',
    'passes_indicator_filters',
    'SetupReason',
    'SetupRule',
    'SetupMatch',
    'STANDARD_RULES',
    'LEO_RULES',
    'classify_setup',
    'STANDARD_PRIORITY',
    'LEO_PRIORITY',
    'priority_order',
    'rank_and_cap',
    'PriceTarget',
    'calculate_price_targets',
    'ClassifiedPick',
    'ScreenStats',
    'EngineOutput',
    'ScreenerEngine',
    'run'
]
