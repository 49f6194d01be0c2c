"""
Aggregation engine: turns a table plus one AggregationConfig into a Series.
Calculations only: malformed cells are excluded or mapped to sentinel labels,
never raised.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .cells import (
    NOT_AVAILABLE_LABEL,
    NULL_LABEL,
    Cell,
    cell_label,
    classify_cell,
    format_date,
    format_number,
    parse_date,
    round2,
)
from .config import ALL, AggregationConfig
from .table import Table

logger = logging.getLogger(__name__)

BIN_LABEL_SEPARATOR = "–"


@dataclass(frozen=True)
class SeriesPoint:
    name: str
    value: float


Series = List[SeriesPoint]


def _project(table: Table, config: AggregationConfig) -> List[Tuple[Cell, Optional[float]]]:
    pairs = []
    for r in table.records:
        category = classify_cell(r.get(config.category_key))
        value = classify_cell(r.get(config.value_key)).number if config.value_key else None
        pairs.append((category, value))
    return pairs


def bin_label(low: float, high: float) -> str:
    return f"{format_number(round2(low))}{BIN_LABEL_SEPARATOR}{format_number(round2(high))}"


def _bin_labels(categories: List[Cell], bin_count: int) -> Optional[List[str]]:
    """
    Equal-width bins over the observed numeric range. The last bin is closed on
    both ends so the maximum lands inside it. None when nothing is numeric.
    """
    nums = [c.number for c in categories if c.is_number]
    if not nums:
        return None
    lo, hi = min(nums), max(nums)
    span = (hi - lo) or 1
    width = span / bin_count
    labels = []
    for c in categories:
        if not c.is_number:
            labels.append(NOT_AVAILABLE_LABEL)
            continue
        idx = int(math.floor((c.number - lo) / width))
        if idx >= bin_count:
            idx = bin_count - 1
        bin_lo = lo + idx * width
        labels.append(bin_label(bin_lo, bin_lo + width))
    return labels


def _labels(categories: List[Cell], config: AggregationConfig) -> List[str]:
    if config.group_mode == "date":
        return [format_date(parse_date(c.raw), config.date_granularity) for c in categories]
    if config.group_mode == "bins":
        numeric_column = all(c.is_empty or c.is_number for c in categories)
        if numeric_column:
            labels = _bin_labels(categories, config.bin_count)
            if labels is not None:
                return labels
    return [cell_label(c) for c in categories]


def _reduce(aggregator: str, values: List[Optional[float]]) -> float:
    if aggregator == "count":
        return len(values)
    nums = [v for v in values if v is not None]
    if aggregator == "sum":
        total = 0.0
        for v in nums:
            total += v
        return total
    if not nums:
        return 0
    if aggregator == "avg":
        total = 0.0
        for v in nums:
            total += v
        return total / len(nums)
    if aggregator == "min":
        return min(nums)
    if aggregator == "max":
        return max(nums)
    return 0


def aggregate(table: Optional[Table], config: AggregationConfig) -> Series:
    """
    Group table rows by the (transformed) category label and reduce each bucket.
    Returns points sorted by value descending, truncated to config.result_limit.
    Empty table or missing category key -> [].
    """
    if table is None or table.is_empty or not config.category_key:
        return []

    pairs = _project(table, config)
    labels = _labels([c for c, _ in pairs], config)

    buckets: Dict[str, List[Optional[float]]] = {}
    for label, (_, value) in zip(labels, pairs):
        key = NULL_LABEL if label is None else label
        buckets.setdefault(key, []).append(value)

    points = [SeriesPoint(name=k, value=_reduce(config.aggregator, vals)) for k, vals in buckets.items()]
    # sorted() is stable: ties keep first-seen bucket order
    points = sorted(points, key=lambda p: p.value, reverse=True)
    logger.debug(
        "aggregate: category_key=%s value_key=%s aggregator=%s group_mode=%s rows=%d buckets=%d",
        config.category_key,
        config.value_key,
        config.aggregator,
        config.group_mode,
        len(pairs),
        len(points),
    )
    if config.result_limit == ALL:
        return points
    return points[: config.result_limit]
