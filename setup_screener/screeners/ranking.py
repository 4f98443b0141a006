"""
Ranking and capping of classified tickers.

Tickers are grouped by setup reason, sorted within each group by score
(highest first, ties keep input order) and taken group by group in priority
order until max_results is reached.
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple, TypeVar

STANDARD_PRIORITY: Tuple[str, ...] = (
    "Breakout",
    "Momentum",
    "Pullback",
    "Fib Pullback",
    "Consolidation",
    "Reversal",
    "Reversal_Accumulation",
    "Reversal_Distribution",
    "BB_Lower_Bounce",
    "BB_Upper_Reject",
    "Stoch_Oversold_Reversal",
    "Stoch_Overbought_Reversal",
)

LEO_PRIORITY: Tuple[str, ...] = (
    "Reversal_Accumulation",
    "BB_Lower_Bounce",
    "Stoch_Oversold_Reversal",
    "Reversal_Distribution",
    "BB_Upper_Reject",
    "Stoch_Overbought_Reversal",
    "Breakout",
    "Momentum",
    "Pullback",
    "Fib Pullback",
    "Consolidation",
    "Reversal",
)

T = TypeVar("T")


def priority_order(leo_enabled: bool) -> Tuple[str, ...]:
    """Group order for the run mode."""
    return LEO_PRIORITY if leo_enabled else STANDARD_PRIORITY


def group_by_reason(items: Iterable[Tuple[str, float, T]]) -> Dict[str, List[Tuple[float, T]]]:
    """
    Group (reason, score, item) triples by reason.

    Each group is sorted by score descending. sorted() is stable, so equal
    scores keep their input order.
    """
    groups: Dict[str, List[Tuple[float, T]]] = defaultdict(list)
    for reason, score, item in items:
        groups[reason].append((score, item))

    return {
        reason: sorted(members, key=lambda member: member[0], reverse=True)
        for reason, members in groups.items()
    }


def rank_and_cap(
    items: Sequence[Tuple[str, float, T]],
    max_results: int,
    leo_enabled: bool = False
) -> List[T]:
    """
    Select at most ``max_results`` items.

    Args:
        items: (reason, score, item) triples in input order
        max_results: Result cap
        leo_enabled: Use the Leo priority order

    Returns:
        Items in output order: priority group first, score descending within
    """
    if max_results <= 0:
        return []

    groups = group_by_reason(items)
    selected: List[T] = []

    for reason in priority_order(leo_enabled):
        remaining = max_results - len(selected)
        if remaining <= 0:
            break
        selected.extend(item for _, item in groups.get(reason, [])[:remaining])

    return selected
