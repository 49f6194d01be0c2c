"""
Summary statistics for the report header and the field review panel.
"""
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .aggregator import SeriesPoint
from .cells import to_number
from .table import Table


@dataclass(frozen=True)
class SeriesSummary:
    count: int = 0
    total: float = 0.0
    average: float = 0.0
    maximum: float = 0.0
    minimum: float = 0.0


@dataclass(frozen=True)
class FieldSummary(SeriesSummary):
    values: Tuple[float, ...] = field(default_factory=tuple)


def _summarize(values: Sequence[float]) -> Tuple[int, float, float, float, float]:
    if not values:
        return 0, 0.0, 0.0, 0.0, 0.0
    total = 0.0
    for v in values:
        total += v
    return len(values), total, total / len(values), max(values), min(values)


def summarize_series(series: Sequence[SeriesPoint]) -> SeriesSummary:
    """Count, sum, average, max and min of the point values; zeros when empty."""
    count, total, avg, hi, lo = _summarize([p.value for p in series])
    return SeriesSummary(count=count, total=total, average=avg, maximum=hi, minimum=lo)


def summarize_field(table: Optional[Table], column: str) -> FieldSummary:
    """Same statistics over the numeric cells of one column."""
    if table is None or not column:
        return FieldSummary()
    values = [n for n in (to_number(v) for v in table.column_values(column)) if n is not None]
    count, total, avg, hi, lo = _summarize(values)
    return FieldSummary(count=count, total=total, average=avg, maximum=hi, minimum=lo, values=tuple(values))
