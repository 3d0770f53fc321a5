"""
Metric Primitives

Small pure statistical helpers shared by the behavioral extractors and the
archetype classifier:

- distribution_of: grouped counts and percentages (optionally weighted)
- argmax_label: modal label with first-in-order tie-break
- clamped_weighted_score: weighted linear blend clamped to [0, 100]
- label_for_score: threshold table lookup
- parse_timestamp: lenient timestamp parsing (malformed -> None)

All scores in the engine live on a single 0-100 scale.
"""

import math
import numbers
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class CategoryShare:
    """Count and share of one label within a distribution."""
    count: float
    percentage: float  # 0-100, unrounded


@dataclass(frozen=True)
class WeightedScore:
    """Clamped weighted score; raw is kept for comparisons, display for output."""
    raw: float       # clamp(sum(value * weight), 0, 100), unrounded
    display: int     # raw rounded half-up


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounded up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float) -> float:
    """part / whole * 100, or 0.0 when whole is zero."""
    if not whole:
        return 0.0
    return part / whole * 100.0


def mean(values: Iterable[float]) -> Optional[float]:
    """Arithmetic mean, or None for an empty input."""
    values = list(values)
    if not values:
        return None
    return float(np.mean(values))


def is_number(value: Any) -> bool:
    """True for real numbers (bool excluded, NaN excluded)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


def distribution_of(
    records: Iterable[Any],
    classifier: Callable[[Any], Optional[str]],
    categories: Optional[Sequence[str]] = None,
    weight: Optional[Callable[[Any], float]] = None,
) -> Dict[str, CategoryShare]:
    """
    Group records by label and return counts and percentages of the total.

    Args:
        records: Records to group
        classifier: Maps a record to its label; None skips the record
        categories: Declared labels. When given, every declared label appears
            in declared order (zero counts included) and undeclared labels
            are appended in first-seen order.
        weight: Optional per-record weight. Percentages are then shares of
            the total weight and `count` holds the summed weight.

    Returns:
        {label: CategoryShare}, or {} when nothing was counted.
    """
    totals: Dict[str, float] = {label: 0 for label in (categories or [])}
    counted = False

    for record in records:
        label = classifier(record)
        if label is None:
            continue
        amount = weight(record) if weight else 1
        totals[label] = totals.get(label, 0) + amount
        counted = True

    grand_total = sum(totals.values())
    if not counted or grand_total == 0:
        return {}

    return {
        label: CategoryShare(count=amount, percentage=amount / grand_total * 100.0)
        for label, amount in totals.items()
    }


def argmax_label(counts: Mapping[str, float]) -> Optional[str]:
    """
    Key with the greatest value.

    Ties resolve to the key that comes first in the mapping's order, so
    callers control the tie-break by the order they build the mapping in.
    """
    best_label = None
    best_value = None
    for label, value in counts.items():
        if best_value is None or value > best_value:
            best_label, best_value = label, value
    return best_label


def modal_label(distribution: Mapping[str, CategoryShare]) -> Optional[str]:
    """argmax_label over a distribution's counts."""
    return argmax_label({label: share.count for label, share in distribution.items()})


def clamped_weighted_score(terms: Iterable[Tuple[float, float]]) -> WeightedScore:
    """
    Blend (value, weight) pairs linearly and clamp to [0, 100].

    The unrounded value is kept in `raw`; categorical thresholds are applied
    to the rounded `display` value.
    """
    total = sum(value * weight for value, weight in terms)
    raw = clamp(total, 0.0, 100.0)
    return WeightedScore(raw=raw, display=round_half_up(raw))


def label_for_score(
    score: float,
    thresholds: Sequence[Tuple[float, str]],
    default: str,
) -> str:
    """
    Pick a label from (bound, label) pairs checked in order.

    The first pair whose bound the score strictly exceeds wins; otherwise
    `default` is returned.
    """
    for bound, label in thresholds:
        if score > bound:
            return label
    return default


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse an event timestamp into a UTC pandas Timestamp.

    Accepts ISO-8601 strings, datetime and date objects. Naive values are
    taken as UTC. Anything unparseable returns None.
    """
    if value is None:
        return None

    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)

    if isinstance(value, datetime):
        ts = pd.Timestamp(value)
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            ts = pd.to_datetime(value.strip(), format="ISO8601")
        except (ValueError, TypeError, OverflowError):
            return None
    else:
        return None

    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def days_between(start: pd.Timestamp, end: pd.Timestamp) -> float:
    """Fractional days from start to end."""
    return (end - start).total_seconds() / 86400.0


def hours_between(start: pd.Timestamp, end: pd.Timestamp) -> float:
    """Fractional hours from start to end."""
    return (end - start).total_seconds() / 3600.0


def numeric_values(records: Iterable[Mapping[str, Any]], field: str) -> List[float]:
    """Numeric values of `field` across records, skipping missing/non-numeric ones."""
    return [float(field_value(record, field)) for record in records if is_number(field_value(record, field))]


def field_value(record: Any, name: str) -> Any:
    """record[name] for mapping records, None for anything else."""
    if isinstance(record, Mapping):
        return record.get(name)
    return None
