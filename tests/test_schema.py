"""Unit tests for column classification and date detection."""

from __future__ import annotations

import pytest

from analytics.schema import (
    classify_columns,
    detect_date_column,
    filter_columns,
    is_numeric_compatible,
    numeric_columns,
    value_column_choices,
)
from analytics.table import Table

pytestmark = pytest.mark.unit


def test_is_numeric_compatible_allows_empty_cells() -> None:
    """Empty cells do not disqualify a numeric column; text does."""

    assert is_numeric_compatible([1, "2.5", None, ""])
    assert not is_numeric_compatible([1, "two"])
    assert is_numeric_compatible([])


def test_classify_columns(sales_table: Table) -> None:
    """Only the amount column is numeric-compatible."""

    assert classify_columns(sales_table) == {"amount"}
    assert numeric_columns(sales_table) == ["amount"]


def test_classify_columns_empty_table() -> None:
    """An empty table has no numeric columns."""

    assert classify_columns(Table(columns=("a",))) == set()


def test_detect_date_column_threshold() -> None:
    """A column is a date column when more than 60% of sampled rows parse."""

    table = Table.from_records(
        [{"d": "2024-01-01"}, {"d": "2024-02-01"}, {"d": "2024-03-01"}, {"d": "soon"}]
    )
    detection = detect_date_column(table, "d")
    assert detection.is_date
    assert detection.parse_rate == 0.75

    mostly_text = Table.from_records([{"d": "2024-01-01"}, {"d": "x"}, {"d": "y"}])
    assert not detect_date_column(mostly_text, "d").is_date


def test_detect_date_column_samples_head_only() -> None:
    """Only the first 200 rows are sampled."""

    rows = [{"d": "2024-01-01"}] * 200 + [{"d": "nope"}] * 500
    detection = detect_date_column(Table.from_records(rows), "d")
    assert detection.is_date
    assert detection.parse_rate == 1.0


def test_detect_date_column_empty_table() -> None:
    """An empty table is never a date column."""

    detection = detect_date_column(Table(columns=("d",)), "d")
    assert not detection.is_date
    assert detection.parse_rate == 0.0


def test_filter_columns_case_insensitive() -> None:
    """Column search is a case-insensitive substring match preserving order."""

    columns = ["Region", "Amount", "region_code"]
    assert filter_columns(columns, "REG") == ["Region", "region_code"]
    assert filter_columns(columns, "  ") == columns
    assert filter_columns(columns, "zzz") == []


def test_value_column_choices_start_with_none() -> None:
    """The value selector offers no column first, then every column in order."""

    assert value_column_choices(["region", "amount"]) == ["", "region", "amount"]
    assert value_column_choices([]) == [""]
