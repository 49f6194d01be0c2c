"""
Per-chart series for the live display and for the exported report.
Each chart gets its own AggregationConfig from the mappings; nothing is shared
between chart runs.
"""
import logging
from typing import Dict, Optional

from .aggregator import Series, aggregate
from .config import ALL, ChartMappings
from .minority import collapse_minorities
from .table import Table

logger = logging.getLogger(__name__)

REPORT_CHARTS = ("bar", "pie", "area", "tree")


def live_series(table: Optional[Table], mappings: ChartMappings) -> Dict[str, Series]:
    """Series for every on-screen chart; top-N applies to bar, pie and area."""
    top_n = mappings.top_n
    pie_raw = aggregate(table, mappings.config_for("pie", ALL))
    return {
        "bar": aggregate(table, mappings.config_for("bar", top_n)),
        "line": aggregate(table, mappings.config_for("line", ALL)),
        "pie": collapse_minorities(pie_raw, mappings.pie_others_threshold, top_n),
        "area": aggregate(table, mappings.config_for("area", top_n)),
        "tree": aggregate(table, mappings.config_for("tree", ALL)),
    }


def report_series(table: Optional[Table], mappings: ChartMappings) -> Dict[str, Series]:
    """Untruncated series for the four report charts."""
    out = {kind: aggregate(table, mappings.config_for(kind, ALL)) for kind in REPORT_CHARTS}
    out["pie"] = collapse_minorities(out["pie"], mappings.pie_others_threshold, ALL)
    logger.info(
        "report_series: rows=%d %s",
        len(table) if table is not None else 0,
        " ".join(f"{k}={len(v)}" for k, v in out.items()),
    )
    return out
