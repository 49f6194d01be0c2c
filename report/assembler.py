"""
Report assembler: one self-contained HTML document with summary numbers and
the four charts as inline SVG. No external scripts, stylesheets or images.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from analytics.aggregator import SeriesPoint
from analytics.cells import format_fixed2
from analytics.config import ChartMappings
from analytics.pipeline import report_series
from analytics.stats import SeriesSummary, summarize_series
from analytics.table import Table
from charts.area import build_area_geometry
from charts.bar import build_bar_geometry
from charts.pie import build_pie_geometry
from charts.svg import render_svg
from charts.treemap import build_treemap_geometry

logger = logging.getLogger(__name__)

REPORT_TITLE = "CodeLense — Data Report"
# Series the summary numbers are computed over
SUMMARY_CHART = "bar"

SECTIONS = (
    ("bar", "Bar Chart", build_bar_geometry),
    ("pie", "Pie Chart", build_pie_geometry),
    ("area", "Area Chart", build_area_geometry),
    ("tree", "Treemap", build_treemap_geometry),
)


def _template_env() -> Environment:
    templates_path = Path(__file__).resolve().parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(templates_path)),
        autoescape=select_autoescape(enabled_extensions=("html", "xml", "j2")),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def summary_stats(summary: SeriesSummary) -> Dict[str, str]:
    """The five header numbers as display text."""
    return {
        "Records": str(summary.count),
        "Sum": format_fixed2(summary.total),
        "Avg": format_fixed2(summary.average),
        "Max": format_fixed2(summary.maximum),
        "Min": format_fixed2(summary.minimum),
    }


def assemble_report(
    series_by_chart: Mapping[str, Sequence[SeriesPoint]],
    generated_at: Optional[datetime] = None,
    title: str = REPORT_TITLE,
) -> str:
    """
    Render the report document.
    series_by_chart: "bar", "pie", "area", "tree" -> series (missing or empty -> "No data").
    """
    generated_at = generated_at or datetime.now()
    summary = summarize_series(series_by_chart.get(SUMMARY_CHART) or [])
    sections = []
    for kind, heading, build in SECTIONS:
        geometry = build(series_by_chart.get(kind) or [])
        sections.append({"kind": kind, "heading": heading, "svg": Markup(render_svg(geometry))})
    has_data = any(series_by_chart.get(kind) for kind, _, _ in SECTIONS)
    logger.info("report_assembled: has_data=%s records=%d", has_data, summary.count)
    return _template_env().get_template("report.html.j2").render(
        title=title,
        generated_at=generated_at.strftime("%Y-%m-%d %H:%M:%S"),
        stats=summary_stats(summary),
        sections=sections,
        has_data=has_data,
    )


def build_report(
    table: Optional[Table],
    mappings: ChartMappings,
    generated_at: Optional[datetime] = None,
) -> str:
    """Aggregate every report chart from the table and assemble the document."""
    return assemble_report(report_series(table, mappings), generated_at=generated_at)


def report_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"codelense-report-{int(now.timestamp() * 1000)}.html"
