"""
Bar chart geometry: one rectangle per category, heights scaled to the largest value.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from analytics.aggregator import SeriesPoint
from analytics.cells import format_value

from .geometry import NO_DATA, CanvasSize, Margin, NoData
from .palette import color_for

DEFAULT_CANVAS = CanvasSize(width=700, height=300)
MARGIN = Margin(top=20, right=20, bottom=120, left=60)
PER_BAR_WIDTH = 60
BAR_GAP = 10
VALUE_LABEL_OFFSET = 8
NAME_LABEL_OFFSET = 6
NAME_LABEL_ROTATION = 90


@dataclass(frozen=True)
class BarRect:
    x: float
    y: float
    width: float
    height: float
    fill: str
    name: str
    value: float
    value_label: str
    value_label_x: float
    value_label_y: float
    name_label_x: float
    name_label_y: float
    name_label_rotation: float = NAME_LABEL_ROTATION


@dataclass(frozen=True)
class BarGeometry:
    width: float
    height: float
    plot_height: float
    max_value: float
    bars: Tuple[BarRect, ...]


def build_bar_geometry(
    series: Sequence[SeriesPoint],
    canvas: Optional[CanvasSize] = None,
) -> Union[BarGeometry, NoData]:
    if not series:
        return NO_DATA
    canvas = canvas or DEFAULT_CANVAS
    count = len(series)
    width = max(canvas.width, count * PER_BAR_WIDTH)
    height = canvas.height
    plot_w = width - MARGIN.left - MARGIN.right
    plot_h = height - MARGIN.top - MARGIN.bottom
    max_value = max(max(p.value for p in series), 1)
    bar_w = max(plot_w / count - BAR_GAP, 1)

    bars = []
    for i, p in enumerate(series):
        h = max(p.value / max_value * plot_h, 0)
        x = MARGIN.left + i * (bar_w + BAR_GAP)
        y = MARGIN.top + plot_h - h
        center = x + bar_w / 2
        bars.append(BarRect(
            x=x,
            y=y,
            width=bar_w,
            height=h,
            fill=color_for(i),
            name=p.name,
            value=p.value,
            value_label=format_value(p.value),
            value_label_x=center,
            value_label_y=y - VALUE_LABEL_OFFSET,
            name_label_x=center,
            name_label_y=MARGIN.top + plot_h + NAME_LABEL_OFFSET,
        ))
    return BarGeometry(width=width, height=height, plot_height=plot_h, max_value=max_value, bars=tuple(bars))
