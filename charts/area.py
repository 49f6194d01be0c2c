"""
Area chart geometry: a polyline through the points plus a filled path closed on the baseline.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from analytics.aggregator import SeriesPoint

from .geometry import NO_DATA, CanvasSize, Margin, NoData, fmt
from .palette import AREA_FILL, color_for

DEFAULT_CANVAS = CanvasSize(width=900, height=300)
MARGIN = Margin(top=20, right=20, bottom=40, left=60)
NAME_LABEL_OFFSET = 16


@dataclass(frozen=True)
class AreaPoint:
    x: float
    y: float
    name: str
    value: float


@dataclass(frozen=True)
class AreaGeometry:
    width: float
    height: float
    baseline_y: float
    points: Tuple[AreaPoint, ...]
    stroke_path: str
    fill_path: str
    stroke: str
    fill: str
    label_y: float


def build_area_geometry(
    series: Sequence[SeriesPoint],
    canvas: Optional[CanvasSize] = None,
) -> Union[AreaGeometry, NoData]:
    if not series:
        return NO_DATA
    canvas = canvas or DEFAULT_CANVAS
    plot_w = canvas.width - MARGIN.left - MARGIN.right
    plot_h = canvas.height - MARGIN.top - MARGIN.bottom
    max_value = max(max(p.value for p in series), 1)
    step = plot_w / max(len(series) - 1, 1)
    baseline = MARGIN.top + plot_h

    points = tuple(
        AreaPoint(
            x=MARGIN.left + step * i,
            y=MARGIN.top + plot_h - p.value / max_value * plot_h,
            name=p.name,
            value=p.value,
        )
        for i, p in enumerate(series)
    )
    stroke = " ".join(f"{'M' if i == 0 else 'L'} {fmt(pt.x)} {fmt(pt.y)}" for i, pt in enumerate(points))
    line_to = " ".join(f"L {fmt(pt.x)} {fmt(pt.y)}" for pt in points)
    fill = f"M {fmt(MARGIN.left)} {fmt(baseline)} {line_to} L {fmt(MARGIN.left + plot_w)} {fmt(baseline)} Z"
    return AreaGeometry(
        width=canvas.width,
        height=canvas.height,
        baseline_y=baseline,
        points=points,
        stroke_path=stroke,
        fill_path=fill,
        stroke=color_for(0),
        fill=AREA_FILL,
        label_y=baseline + NAME_LABEL_OFFSET,
    )
