"""Pytest fixtures shared across the analytics, chart and report tests."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from analytics.aggregator import SeriesPoint
from analytics.table import Table


@pytest.fixture
def sales_table() -> Table:
    """Return a small sales table with a text, a numeric and a date column."""

    return Table.from_records(
        [
            {"region": "North", "amount": 10, "date": "2024-01-05"},
            {"region": "South", "amount": 20, "date": "2024-01-20"},
            {"region": "North", "amount": 5, "date": "2024-02-02"},
            {"region": "East", "amount": 1, "date": "2024-02-10"},
            {"region": "West", "amount": None, "date": "2024-03-01"},
        ],
        columns=["region", "amount", "date"],
    )


@pytest.fixture
def two_point_series() -> list[SeriesPoint]:
    """Return a descending two-point series."""

    return [SeriesPoint(name="a", value=10), SeriesPoint(name="b", value=5)]


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, in-memory tests.
    - `integration`: tests touching file decoding or the preference store.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            invalid.append(item.nodeid)

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
