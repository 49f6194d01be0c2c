"""
Shared geometry primitives for the chart builders.
All geometry is plain frozen data, recomputed from a series on every render.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class CanvasSize:
    width: float
    height: float


@dataclass(frozen=True)
class Margin:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class NoData:
    """Returned by every builder instead of geometry when the series is empty."""

    message: str = "No data"


NO_DATA = NoData()


def fmt(n: float) -> str:
    """Coordinate text: 2 decimal places, trailing zeros dropped."""
    text = f"{n:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text
