"""Unit tests for AggregationConfig validation and the chart mapping record."""

from __future__ import annotations

import pytest

from analytics.aggregator import aggregate
from analytics.config import ALL, AggregationConfig, ChartMappings
from analytics.table import Table

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "kwargs",
    [
        {"aggregator": "median"},
        {"group_mode": "weekly"},
        {"date_granularity": "week"},
        {"bin_count": 0},
        {"bin_count": True},
        {"result_limit": 0},
        {"result_limit": "some"},
    ],
)
def test_aggregation_config_rejects_invalid_values(kwargs) -> None:
    """Invalid enumerations and non-positive integers raise ValueError."""

    with pytest.raises(ValueError):
        AggregationConfig(category_key="g", **kwargs)


def test_aggregation_config_defaults() -> None:
    """Defaults: sum, no grouping, 8 bins, month, no limit."""

    config = AggregationConfig(category_key="g")
    assert config.aggregator == "sum"
    assert config.group_mode == "none"
    assert config.bin_count == 8
    assert config.date_granularity == "month"
    assert config.result_limit == ALL
    assert config.with_limit(5).result_limit == 5


def test_with_defaults_uses_first_two_columns() -> None:
    """Category defaults to the first column and value to the second."""

    mappings = ChartMappings.with_defaults(["region", "amount", "date"])
    for kind in ("bar", "line", "pie", "area", "tree"):
        chart = mappings.chart(kind)
        assert chart.category_key == "region"
        assert chart.value_key == "amount"
    assert mappings.review_field == "amount"
    assert mappings.top_n == 10
    assert mappings.pie_others_threshold == 0.03
    assert not mappings.use_global


def test_with_defaults_single_column_has_no_value_key() -> None:
    """A one-column table leaves the value key unset."""

    mappings = ChartMappings.with_defaults(["only"])
    config = mappings.config_for("bar")
    assert config.category_key == "only"
    assert config.value_key is None


def test_with_defaults_keeps_valid_stored_values() -> None:
    """Stored values override defaults when they are valid."""

    stored = {"barX": "date", "barAgg": "avg", "barGroup": "date", "barDateGranularity": "year", "topN": "all"}
    mappings = ChartMappings.with_defaults(["region", "amount", "date"], stored)
    assert mappings.bar.category_key == "date"
    assert mappings.bar.aggregator == "avg"
    assert mappings.bar.group_mode == "date"
    assert mappings.bar.date_granularity == "year"
    assert mappings.top_n == ALL


def test_with_defaults_replaces_malformed_stored_values() -> None:
    """Malformed stored values fall back to defaults instead of raising."""

    stored = {
        "pieAgg": "median",
        "areaBinCount": -3,
        "lineBinCount": "many",
        "topN": 0,
        "pieOthersThreshold": 2,
        "globalGroup": None,
    }
    mappings = ChartMappings.with_defaults(["a", "b"], stored)
    assert mappings.pie.aggregator == "sum"
    assert mappings.area.bin_count == 8
    assert mappings.line.bin_count == 8
    assert mappings.top_n == 10
    assert mappings.pie_others_threshold == 0.03
    assert mappings.global_group == "none"


def test_record_round_trip() -> None:
    """A record written by to_record rebuilds identical mappings."""

    mappings = ChartMappings.with_defaults(["a", "b", "c"]).edit_chart("tree", group_mode="bins", bin_count=4)
    mappings = mappings.edit(use_global=True, global_x="c", top_n=ALL)
    record = mappings.to_record()
    assert record["treeGroup"] == "bins"
    assert record["treeBinCount"] == 4
    assert record["useGlobal"] is True
    assert ChartMappings.with_defaults(["a", "b", "c"], record) == mappings


def test_global_mapping_wins_when_enabled() -> None:
    """With use_global the global category, value, aggregator and group apply to every chart."""

    mappings = ChartMappings.with_defaults(["a", "b", "c"]).edit(
        use_global=True, global_x="c", global_y="a", global_agg="count", global_group="bins"
    )
    config = mappings.config_for("pie", 3)
    assert config.category_key == "c"
    assert config.value_key == "a"
    assert config.aggregator == "count"
    assert config.group_mode == "bins"
    assert config.result_limit == 3


def test_edit_chart_changes_only_one_chart() -> None:
    """Editing one chart leaves the others untouched."""

    base = ChartMappings.with_defaults(["a", "b"])
    edited = base.edit_chart("bar", aggregator="max")
    assert edited.bar.aggregator == "max"
    assert edited.line == base.line
    assert base.bar.aggregator == "sum"


def test_unknown_chart_kind_raises() -> None:
    """Unknown chart kinds are programmer errors."""

    mappings = ChartMappings.with_defaults(["a"])
    with pytest.raises(ValueError):
        mappings.chart("radar")
    with pytest.raises(ValueError):
        mappings.edit_chart("radar", aggregator="sum")


def test_unset_value_key_survives_record_round_trip() -> None:
    """Choosing no value column is kept through save and load, and count still works."""

    table = Table.from_records([{"g": "a"}, {"g": "a"}, {"g": "a"}, {"g": "b"}])
    mappings = ChartMappings.with_defaults(["g", "v"]).edit_chart("bar", value_key="", aggregator="count")
    reloaded = ChartMappings.with_defaults(["g", "v"], mappings.to_record())
    assert reloaded.bar.value_key == ""
    config = reloaded.config_for("bar")
    assert config.value_key is None
    assert [(p.name, p.value) for p in aggregate(table, config)] == [("a", 3), ("b", 1)]
