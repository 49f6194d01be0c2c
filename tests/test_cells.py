"""Unit tests for cell classification and value formatting."""

from __future__ import annotations

import numpy as np
import pytest

from analytics.cells import (
    EMPTY,
    INVALID_DATE_LABEL,
    NUMBER,
    TEXT,
    cell_label,
    classify_cell,
    format_date,
    format_fixed2,
    format_number,
    format_value,
    parse_date,
    round2,
    to_number,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("value", [None, "", "   ", float("nan")])
def test_classify_cell_empty_values(value) -> None:
    """None, blank strings and NaN are Empty."""

    assert classify_cell(value).kind == EMPTY


@pytest.mark.parametrize(
    ("value", "expected"),
    [(3, 3.0), (2.5, 2.5), ("42", 42.0), (" -1.5 ", -1.5), ("1e3", 1000.0)],
)
def test_classify_cell_numbers(value, expected) -> None:
    """Ints, floats and numeric text are Numbers with a finite value."""

    cell = classify_cell(value)
    assert cell.kind == NUMBER
    assert cell.number == expected


@pytest.mark.parametrize("value", ["abc", "1_000", "inf", "NaN", True, float("inf")])
def test_classify_cell_text(value) -> None:
    """Non-numeric text, booleans and non-finite numbers are Text."""

    cell = classify_cell(value)
    assert cell.kind == TEXT
    assert cell.number is None


def test_to_number_returns_none_for_non_numbers() -> None:
    """to_number only yields finite floats."""

    assert to_number("7") == 7.0
    assert to_number("seven") is None
    assert to_number(None) is None


def test_cell_label_forms() -> None:
    """Category labels keep text as-is, print integral numbers without decimals, and map None to 'null'."""

    assert cell_label(classify_cell(None)) == "null"
    assert cell_label(classify_cell(3.0)) == "3"
    assert cell_label(classify_cell(2.5)) == "2.5"
    assert cell_label(classify_cell("05")) == "05"
    assert cell_label(classify_cell("North")) == "North"


def test_format_number_and_rounding() -> None:
    """Number display and half-up rounding helpers."""

    assert format_number(5.0) == "5"
    assert format_number(5.25) == "5.25"
    assert round2(2.675) == 2.67
    assert round2(0.125) == 0.13
    assert round2(None) == 0.0
    assert format_fixed2(3) == "3.00"
    assert format_fixed2(None) == "0.00"


def test_format_value_uses_separators() -> None:
    """Bar value labels use thousands separators and at most three decimals."""

    assert format_value(1234567) == "1,234,567"
    assert format_value(1234.5) == "1,234.5"
    assert format_value(0.12345) == "0.123"


def test_parse_date_text_and_epoch_millis() -> None:
    """Date text parses directly; numbers are epoch milliseconds."""

    assert format_date(parse_date("2024-03-15"), "month") == "2024-03"
    assert format_date(parse_date(0), "day") == "1970-01-01"
    assert parse_date("not a date") is None
    assert parse_date(None) is None


def test_format_date_granularities() -> None:
    """Year, month and day render as YYYY, YYYY-MM, YYYY-MM-DD."""

    ts = parse_date("2023-11-02")
    assert format_date(ts, "year") == "2023"
    assert format_date(ts, "month") == "2023-11"
    assert format_date(ts, "day") == "2023-11-02"
    assert format_date(None, "day") == INVALID_DATE_LABEL


def test_classify_cell_never_raises_on_odd_objects() -> None:
    """Unknown objects are Text rather than errors."""

    cell = classify_cell(object())
    assert cell.kind == TEXT
    assert isinstance(cell_label(cell), str)


@pytest.mark.parametrize("value", [np.int64(3), np.float32(3.0), np.float64(3.0)])
def test_classify_cell_numpy_scalars_are_numbers(value) -> None:
    """numpy scalars classify like their Python counterparts."""

    cell = classify_cell(value)
    assert cell.kind == NUMBER
    assert cell.number == 3.0
    assert cell_label(cell) == "3"


def test_classify_cell_numpy_bool_and_nan() -> None:
    """numpy booleans are Text and numpy NaN is Empty."""

    assert classify_cell(np.bool_(True)).kind == TEXT
    nan = classify_cell(np.float32("nan"))
    assert nan.kind == EMPTY
    assert cell_label(nan) == "null"


@pytest.mark.parametrize("value", ["today", "now", " Now ", "TODAY"])
def test_parse_date_rejects_clock_relative_words(value: str) -> None:
    """Words that pandas resolves against the current clock are not dates."""

    assert parse_date(value) is None
