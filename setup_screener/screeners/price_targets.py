"""
Price targets for Leo reversal picks.

Targets come from three sources: unfilled Fair Value Gap midpoints, recent
swing highs above price and a +10% ceiling.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Literal

import pandas as pd

from setup_screener.indicators.snapshot import Indicators

TargetType = Literal["fvg", "swing", "percentage"]

MAX_TARGETS = 5
MAX_TARGET_PCT = 0.10


@dataclass
class PriceTarget:
    type: TargetType
    price: float
    description: str
    confidence: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def calculate_price_targets(df: pd.DataFrame, ind: Indicators) -> List[PriceTarget]:
    """
    Collect candidate targets and return the nearest five, ascending by price.

    Bullish gaps count only when their midpoint is above price, bearish gaps
    only when it is below. Only the three most recent swing highs are used.
    """
    price = float(df['Close'].iloc[-1])
    targets: List[PriceTarget] = []

    for zone in ind.fvg_zones or []:
        if zone.is_filled:
            continue
        if zone.type == "bullish" and zone.midpoint > price:
            targets.append(PriceTarget("fvg", zone.midpoint, "FVG 50% retracement", 80))
        elif zone.type == "bearish" and zone.midpoint < price:
            targets.append(PriceTarget("fvg", zone.midpoint, "FVG 50% retracement", 80))

    for swing in (ind.swing_highs or [])[-3:]:
        if swing.price > price:
            targets.append(PriceTarget(
                "swing",
                swing.price,
                f"Previous swing high ({swing.date})",
                70
            ))

    targets.append(PriceTarget(
        "percentage",
        price * (1 + MAX_TARGET_PCT),
        "Maximum realistic target (~10%)",
        50
    ))

    targets.sort(key=lambda t: t.price)
    return targets[:MAX_TARGETS]
