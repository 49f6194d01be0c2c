"""
Pie chart geometry: wedges by cumulative share, clockwise from 12 o'clock.
"""
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from analytics.aggregator import SeriesPoint

from .geometry import NO_DATA, CanvasSize, NoData, fmt
from .palette import color_for

DEFAULT_CANVAS = CanvasSize(width=450, height=450)
LABEL_OFFSET = 40
# Room kept between the circle and the canvas edge for outer labels
LABEL_SPACE = 85
MIN_RADIUS = 10
START_ANGLE = -math.pi / 2
FULL_CIRCLE = 2 * math.pi
FULL_CIRCLE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Wedge:
    name: str
    value: float
    share: float
    start_angle: float
    end_angle: float
    large_arc: int
    path: str
    fill: str
    label: str
    label_x: float
    label_y: float


@dataclass(frozen=True)
class PieGeometry:
    width: float
    height: float
    cx: float
    cy: float
    radius: float
    wedges: Tuple[Wedge, ...]


def percent_label(share: float) -> str:
    return f"{share * 100:.1f}"


def wedge_path(cx: float, cy: float, r: float, start: float, end: float) -> str:
    """SVG path for one sector; a full circle is drawn as two half arcs."""
    x1 = cx + r * math.cos(start)
    y1 = cy + r * math.sin(start)
    if end - start >= FULL_CIRCLE - FULL_CIRCLE_TOLERANCE:
        mid = start + math.pi
        xm = cx + r * math.cos(mid)
        ym = cy + r * math.sin(mid)
        return (
            f"M {fmt(x1)} {fmt(y1)} A {fmt(r)} {fmt(r)} 0 1 1 {fmt(xm)} {fmt(ym)} "
            f"A {fmt(r)} {fmt(r)} 0 1 1 {fmt(x1)} {fmt(y1)} Z"
        )
    x2 = cx + r * math.cos(end)
    y2 = cy + r * math.sin(end)
    large = 1 if end - start > math.pi else 0
    return (
        f"M {fmt(cx)} {fmt(cy)} L {fmt(x1)} {fmt(y1)} "
        f"A {fmt(r)} {fmt(r)} 0 {large} 1 {fmt(x2)} {fmt(y2)} Z"
    )


def build_pie_geometry(
    series: Sequence[SeriesPoint],
    canvas: Optional[CanvasSize] = None,
) -> Union[PieGeometry, NoData]:
    if not series:
        return NO_DATA
    canvas = canvas or DEFAULT_CANVAS
    cx = canvas.width / 2
    cy = canvas.height / 2
    r = max(min(canvas.width, canvas.height) / 2 - LABEL_SPACE, MIN_RADIUS)
    total = sum(p.value for p in series) or 1

    wedges = []
    angle = START_ANGLE
    for i, p in enumerate(series):
        share = p.value / total
        sweep = share * FULL_CIRCLE
        start, end = angle, angle + sweep
        mid = (start + end) / 2
        wedges.append(Wedge(
            name=p.name,
            value=p.value,
            share=share,
            start_angle=start,
            end_angle=end,
            large_arc=1 if sweep > math.pi else 0,
            path=wedge_path(cx, cy, r, start, end),
            fill=color_for(i),
            label=f"{p.name} ({percent_label(share)}%)",
            label_x=cx + (r + LABEL_OFFSET) * math.cos(mid),
            label_y=cy + (r + LABEL_OFFSET) * math.sin(mid),
        ))
        angle = end
    return PieGeometry(width=canvas.width, height=canvas.height, cx=cx, cy=cy, radius=r, wedges=tuple(wedges))
