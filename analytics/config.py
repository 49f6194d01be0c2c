"""
Aggregation config and the persisted chart-mapping record.

AggregationConfig is what the engine consumes: one immutable value per chart.
ChartMappings is the record the preference store keeps (keyed by barX, pieAgg,
...). ChartMappings.with_defaults is the only place partial records are merged
with defaults.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)

AGGREGATORS = ("sum", "avg", "count", "min", "max")
GROUP_MODES = ("none", "bins", "date")
DATE_GRANULARITIES = ("day", "month", "year")
ALL = "all"

DEFAULT_AGGREGATOR = "sum"
DEFAULT_GROUP_MODE = "none"
DEFAULT_BIN_COUNT = 8
DEFAULT_DATE_GRANULARITY = "month"
DEFAULT_TOP_N = 10
DEFAULT_OTHERS_THRESHOLD = 0.03

CHART_KINDS = ("bar", "line", "pie", "area", "tree")

# Persisted key names: (category, value) per chart; the rest use the chart prefix
_AXIS_KEYS = {
    "bar": ("barX", "barY"),
    "line": ("lineX", "lineY"),
    "pie": ("pieLabel", "pieValue"),
    "area": ("areaX", "areaY"),
    "tree": ("treeName", "treeSize"),
}

ResultLimit = Union[int, str]


def _valid_limit(limit: Any) -> bool:
    if limit == ALL:
        return True
    return isinstance(limit, int) and not isinstance(limit, bool) and limit > 0


@dataclass(frozen=True)
class AggregationConfig:
    """Everything the aggregation engine needs for one chart."""

    category_key: Optional[str]
    value_key: Optional[str] = None
    aggregator: str = DEFAULT_AGGREGATOR
    group_mode: str = DEFAULT_GROUP_MODE
    bin_count: int = DEFAULT_BIN_COUNT
    date_granularity: str = DEFAULT_DATE_GRANULARITY
    result_limit: ResultLimit = ALL

    def __post_init__(self):
        if self.aggregator not in AGGREGATORS:
            raise ValueError(f"unknown aggregator: {self.aggregator!r}")
        if self.group_mode not in GROUP_MODES:
            raise ValueError(f"unknown group mode: {self.group_mode!r}")
        if self.date_granularity not in DATE_GRANULARITIES:
            raise ValueError(f"unknown date granularity: {self.date_granularity!r}")
        if isinstance(self.bin_count, bool) or not isinstance(self.bin_count, int) or self.bin_count <= 0:
            raise ValueError(f"bin_count must be a positive integer, got {self.bin_count!r}")
        if not _valid_limit(self.result_limit):
            raise ValueError(f"result_limit must be a positive integer or 'all', got {self.result_limit!r}")

    def with_limit(self, result_limit: ResultLimit) -> "AggregationConfig":
        return replace(self, result_limit=result_limit)


# ---------------------------------------------------------------------------
# Coercion of persisted values (missing or malformed → default)
# ---------------------------------------------------------------------------
def _choice(value: Any, allowed: Sequence[str], default: str) -> str:
    return value if isinstance(value, str) and value in allowed else default


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        n = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return n if n > 0 else default


def _limit(value: Any, default: int) -> ResultLimit:
    if value == ALL:
        return ALL
    return _positive_int(value, default)


def _fraction(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        f = float(value)
    except (TypeError, ValueError):
        return default
    return f if 0.0 <= f <= 1.0 else default


def _column(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value)


@dataclass(frozen=True)
class ChartMapping:
    """Field selection and grouping for one chart."""

    category_key: str = ""
    value_key: str = ""
    aggregator: str = DEFAULT_AGGREGATOR
    group_mode: str = DEFAULT_GROUP_MODE
    bin_count: int = DEFAULT_BIN_COUNT
    date_granularity: str = DEFAULT_DATE_GRANULARITY

    def to_config(self, result_limit: ResultLimit = ALL) -> AggregationConfig:
        return AggregationConfig(
            category_key=self.category_key or None,
            value_key=self.value_key or None,
            aggregator=self.aggregator,
            group_mode=self.group_mode,
            bin_count=self.bin_count,
            date_granularity=self.date_granularity,
            result_limit=result_limit,
        )


@dataclass(frozen=True)
class ChartMappings:
    """The full mapping record for all charts."""

    bar: ChartMapping = field(default_factory=ChartMapping)
    line: ChartMapping = field(default_factory=ChartMapping)
    pie: ChartMapping = field(default_factory=ChartMapping)
    area: ChartMapping = field(default_factory=ChartMapping)
    tree: ChartMapping = field(default_factory=ChartMapping)
    pie_others_threshold: float = DEFAULT_OTHERS_THRESHOLD
    global_x: str = ""
    global_y: str = ""
    global_agg: str = DEFAULT_AGGREGATOR
    global_group: str = DEFAULT_GROUP_MODE
    review_field: str = ""
    use_global: bool = False
    top_n: ResultLimit = DEFAULT_TOP_N

    @classmethod
    def with_defaults(
        cls,
        columns: Sequence[str],
        stored: Optional[Mapping[str, Any]] = None,
    ) -> "ChartMappings":
        """
        Build mappings for a column list, taking any stored values that are valid.
        Default category = first column, default value = second column.
        Called once per table load and once per explicit edit.
        """
        stored = stored or {}
        cols = list(columns or [])
        default_x = cols[0] if cols else ""
        default_y = cols[1] if len(cols) > 1 else ""
        logger.debug("chart_mappings_defaults: columns=%d stored_keys=%d", len(cols), len(stored))

        charts = {}
        for kind in CHART_KINDS:
            x_key, y_key = _AXIS_KEYS[kind]
            charts[kind] = ChartMapping(
                category_key=_column(stored.get(x_key), default_x),
                value_key=_column(stored.get(y_key), default_y),
                aggregator=_choice(stored.get(f"{kind}Agg"), AGGREGATORS, DEFAULT_AGGREGATOR),
                group_mode=_choice(stored.get(f"{kind}Group"), GROUP_MODES, DEFAULT_GROUP_MODE),
                bin_count=_positive_int(stored.get(f"{kind}BinCount"), DEFAULT_BIN_COUNT),
                date_granularity=_choice(
                    stored.get(f"{kind}DateGranularity"), DATE_GRANULARITIES, DEFAULT_DATE_GRANULARITY
                ),
            )
        return cls(
            pie_others_threshold=_fraction(stored.get("pieOthersThreshold"), DEFAULT_OTHERS_THRESHOLD),
            global_x=_column(stored.get("globalX"), default_x),
            global_y=_column(stored.get("globalY"), default_y),
            global_agg=_choice(stored.get("globalAgg"), AGGREGATORS, DEFAULT_AGGREGATOR),
            global_group=_choice(stored.get("globalGroup"), GROUP_MODES, DEFAULT_GROUP_MODE),
            review_field=_column(stored.get("reviewField"), default_y),
            use_global=bool(stored.get("useGlobal", False)),
            top_n=_limit(stored.get("topN"), DEFAULT_TOP_N),
            **charts,
        )

    def to_record(self) -> Dict[str, Any]:
        """Flat record for the preference store."""
        record: Dict[str, Any] = {}
        for kind in CHART_KINDS:
            m = getattr(self, kind)
            x_key, y_key = _AXIS_KEYS[kind]
            record[x_key] = m.category_key
            record[y_key] = m.value_key
            record[f"{kind}Agg"] = m.aggregator
            record[f"{kind}Group"] = m.group_mode
            record[f"{kind}BinCount"] = m.bin_count
            record[f"{kind}DateGranularity"] = m.date_granularity
        record.update({
            "pieOthersThreshold": self.pie_others_threshold,
            "globalX": self.global_x,
            "globalY": self.global_y,
            "globalAgg": self.global_agg,
            "globalGroup": self.global_group,
            "reviewField": self.review_field,
            "useGlobal": self.use_global,
            "topN": self.top_n,
        })
        return record

    def chart(self, kind: str) -> ChartMapping:
        """Effective mapping for a chart; the global mapping wins when use_global is set."""
        if kind not in CHART_KINDS:
            raise ValueError(f"unknown chart kind: {kind!r}")
        m = getattr(self, kind)
        if not self.use_global:
            return m
        return replace(
            m,
            category_key=self.global_x,
            value_key=self.global_y,
            aggregator=self.global_agg,
            group_mode=self.global_group,
        )

    def config_for(self, kind: str, result_limit: ResultLimit = ALL) -> AggregationConfig:
        return self.chart(kind).to_config(result_limit)

    def edit_chart(self, kind: str, **changes: Any) -> "ChartMappings":
        """New mappings with one chart's fields replaced."""
        if kind not in CHART_KINDS:
            raise ValueError(f"unknown chart kind: {kind!r}")
        return replace(self, **{kind: replace(getattr(self, kind), **changes)})

    def edit(self, **changes: Any) -> "ChartMappings":
        return replace(self, **changes)
