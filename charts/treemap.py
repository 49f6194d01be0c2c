"""
Treemap geometry (slice-only): strips packed left to right, widths proportional to share.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from analytics.aggregator import SeriesPoint

from .geometry import NO_DATA, CanvasSize, NoData
from .palette import color_for

DEFAULT_CANVAS = CanvasSize(width=900, height=220)
LABEL_BAND = 30
LABEL_BASELINE_OFFSET = 8


@dataclass(frozen=True)
class Strip:
    x: float
    y: float
    width: float
    height: float
    fill: str
    name: str
    value: float
    label_x: float
    label_y: float


@dataclass(frozen=True)
class TreemapGeometry:
    width: float
    height: float
    strips: Tuple[Strip, ...]


def build_treemap_geometry(
    series: Sequence[SeriesPoint],
    canvas: Optional[CanvasSize] = None,
) -> Union[TreemapGeometry, NoData]:
    if not series:
        return NO_DATA
    canvas = canvas or DEFAULT_CANVAS
    total = sum(p.value for p in series) or 1
    strip_h = canvas.height - LABEL_BAND

    strips = []
    x = 0.0
    for i, p in enumerate(series):
        w = p.value / total * canvas.width
        strips.append(Strip(
            x=x,
            y=0.0,
            width=w,
            height=strip_h,
            fill=color_for(i),
            name=p.name,
            value=p.value,
            label_x=x + w / 2,
            label_y=canvas.height - LABEL_BASELINE_OFFSET,
        ))
        x += w
    return TreemapGeometry(width=canvas.width, height=canvas.height, strips=tuple(strips))
