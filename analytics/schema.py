"""
Schema inspector: which columns are numeric-compatible, which look like dates.
Used to populate selectable fields and the date-grouping hint in the UI.
"""
import logging
from dataclasses import dataclass
from typing import List, Sequence, Set

from .cells import classify_cell, parse_date
from .table import Table

logger = logging.getLogger(__name__)

# Date detection only looks at the head of the table so it stays cheap on rerenders
DATE_SAMPLE_ROWS = 200
DATE_PARSE_THRESHOLD = 0.6


@dataclass(frozen=True)
class DateDetection:
    is_date: bool
    parse_rate: float


def is_numeric_compatible(values: Sequence) -> bool:
    """True when every value is empty/null or parses as a finite number."""
    for v in values:
        cell = classify_cell(v)
        if not (cell.is_empty or cell.is_number):
            return False
    return True


def classify_columns(table: Table) -> Set[str]:
    """Return the set of numeric-compatible column names."""
    if table is None or table.is_empty:
        return set()
    numeric = {c for c in table.columns if is_numeric_compatible(table.column_values(c))}
    logger.debug("classify_columns: columns=%d numeric=%d", len(table.columns), len(numeric))
    return numeric


def numeric_columns(table: Table) -> List[str]:
    """Numeric-compatible columns in table column order."""
    numeric = classify_columns(table)
    return [c for c in table.columns if c in numeric]


def detect_date_column(table: Table, column: str) -> DateDetection:
    """
    Estimate whether a column holds calendar dates.
    Samples at most the first DATE_SAMPLE_ROWS rows; parse_rate = parsed / sampled.
    Advisory only: never blocks aggregation.
    """
    if table is None or not column:
        return DateDetection(is_date=False, parse_rate=0.0)
    sample = table.records[:DATE_SAMPLE_ROWS]
    if not sample:
        return DateDetection(is_date=False, parse_rate=0.0)
    parsed = sum(1 for r in sample if parse_date(r.get(column)) is not None)
    rate = parsed / len(sample)
    return DateDetection(is_date=rate > DATE_PARSE_THRESHOLD, parse_rate=rate)


def filter_columns(columns: Sequence[str], query: str) -> List[str]:
    """Case-insensitive substring filter over column names, order preserved."""
    q = (query or "").strip().lower()
    if not q:
        return list(columns)
    return [c for c in columns if q in str(c).lower()]


def value_column_choices(columns: Sequence[str]) -> List[str]:
    """Value selector options: "" (no value column, for count) followed by the columns."""
    return [""] + [c for c in columns if c != ""]
