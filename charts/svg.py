"""
Inline SVG markup for chart geometry (Jinja2 templates under charts/templates).
"""
from pathlib import Path
from typing import Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .area import AreaGeometry
from .bar import BarGeometry
from .geometry import NoData, fmt
from .pie import PieGeometry
from .treemap import TreemapGeometry

_TEMPLATES = {
    BarGeometry: "bar.svg.j2",
    PieGeometry: "pie.svg.j2",
    AreaGeometry: "area.svg.j2",
    TreemapGeometry: "treemap.svg.j2",
}

Geometry = Union[BarGeometry, PieGeometry, AreaGeometry, TreemapGeometry, NoData]

_env = None


def _template_env() -> Environment:
    global _env
    if _env is None:
        templates_path = Path(__file__).resolve().parent / "templates"
        _env = Environment(
            loader=FileSystemLoader(str(templates_path)),
            autoescape=select_autoescape(enabled_extensions=("html", "xml", "j2")),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _env.filters["num"] = fmt
    return _env


def render_svg(geometry: Geometry) -> str:
    """Render one chart's geometry; NoData renders as a plain placeholder."""
    if isinstance(geometry, NoData):
        return f"<p>{geometry.message}</p>"
    name = _TEMPLATES.get(type(geometry))
    if name is None:
        raise TypeError(f"no SVG template for {type(geometry).__name__}")
    return _template_env().get_template(name).render(g=geometry)
