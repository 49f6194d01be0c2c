"""
Cell classification: every raw table cell becomes Empty | Number | Text.
Numeric and calendar-date parsing live here so the rest of the pipeline never
inspects raw cell types directly.
"""
import math
import numbers
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

import pandas as pd

EMPTY = "empty"
NUMBER = "number"
TEXT = "text"

QUANTIZE = Decimal("0.01")

# Labels produced for cells that cannot be used as-is
NULL_LABEL = "null"
INVALID_DATE_LABEL = "Invalid date"
NOT_AVAILABLE_LABEL = "N/A"

_DATE_FORMATS = {
    "year": "%Y",
    "month": "%Y-%m",
    "day": "%Y-%m-%d",
}

# pandas resolves these to the current clock; they are not calendar dates
_RELATIVE_DATE_WORDS = {"now", "today"}


@dataclass(frozen=True)
class Cell:
    """A classified cell: kind is one of EMPTY, NUMBER, TEXT."""

    kind: str
    raw: Any = None
    number: Optional[float] = None

    @property
    def is_number(self) -> bool:
        return self.kind == NUMBER

    @property
    def is_empty(self) -> bool:
        return self.kind == EMPTY


def _parse_text_number(text: str) -> Optional[float]:
    s = text.strip()
    if not s or "_" in s:
        return None
    try:
        n = float(s)
    except ValueError:
        return None
    if not math.isfinite(n):
        return None
    return n


def classify_cell(value: Any) -> Cell:
    """Classify a raw cell value. Never raises."""
    if value is None:
        return Cell(EMPTY, value)
    if isinstance(value, bool) or pd.api.types.is_bool(value):
        return Cell(TEXT, value)
    if isinstance(value, numbers.Real):
        n = float(value)
        if math.isnan(n):
            return Cell(EMPTY, value)
        if math.isinf(n):
            return Cell(TEXT, value)
        return Cell(NUMBER, value, n)
    if isinstance(value, str):
        if not value.strip():
            return Cell(EMPTY, value)
        n = _parse_text_number(value)
        if n is not None:
            return Cell(NUMBER, value, n)
        return Cell(TEXT, value)
    return Cell(TEXT, value)


def to_number(value: Any) -> Optional[float]:
    """Finite float for numeric cells, None otherwise."""
    return classify_cell(value).number


def format_number(n: float) -> str:
    """Shortest display form: integral floats print without a decimal point."""
    if isinstance(n, int) and not isinstance(n, bool):
        return str(n)
    if math.isfinite(n) and n == int(n) and abs(n) < 1e21:
        return str(int(n))
    return repr(float(n))


def round2(val: Optional[float]) -> float:
    """
    Round the exact binary value of a float to 2 places, ties away from zero.
    1.005 is stored as 1.00499... and rounds to 1.0; 0.125 is exact and rounds to 0.13.
    """
    if val is None:
        return 0.0
    return float(Decimal(val).quantize(QUANTIZE, rounding=ROUND_HALF_UP))


def format_fixed2(val: Optional[float]) -> str:
    """Fixed 2-decimal text, e.g. 3 -> '3.00'."""
    if val is None:
        val = 0.0
    return str(Decimal(str(val)).quantize(QUANTIZE, rounding=ROUND_HALF_UP))


def format_value(val: float) -> str:
    """Value label with thousands separators and at most 3 decimals."""
    if val == int(val):
        return f"{int(val):,}"
    text = f"{val:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def cell_label(cell: Cell) -> str:
    """Category label for a cell when no grouping transform applies."""
    if cell.kind == EMPTY:
        if cell.raw is None or isinstance(cell.raw, numbers.Real):
            return NULL_LABEL
        return str(cell.raw)
    if cell.kind == NUMBER and not isinstance(cell.raw, str):
        return format_number(cell.number)
    return str(cell.raw)


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """
    Calendar-date parse of a raw cell value; None when it does not parse.
    Numbers are read as milliseconds since the epoch.
    """
    cell = classify_cell(value)
    if cell.kind == EMPTY:
        return None
    try:
        if cell.kind == NUMBER and not isinstance(value, str):
            ts = pd.to_datetime(cell.number, unit="ms", errors="coerce")
        else:
            text = str(value).strip()
            if text.lower() in _RELATIVE_DATE_WORDS:
                return None
            ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts


def format_date(ts: Optional[pd.Timestamp], granularity: str) -> str:
    """Render a parsed date as YYYY, YYYY-MM or YYYY-MM-DD."""
    if ts is None:
        return INVALID_DATE_LABEL
    fmt = _DATE_FORMATS.get(granularity, _DATE_FORMATS["day"])
    return ts.strftime(fmt)
