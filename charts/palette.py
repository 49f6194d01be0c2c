"""
Fixed chart palette; colors are assigned by index modulo palette length.
"""
from typing import Tuple

PALETTE: Tuple[str, ...] = (
    "#8b5cf6",
    "#ec4899",
    "#06b6d4",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#6366f1",
    "#fb7185",
    "#14b8a6",
)

AREA_FILL = "rgba(139,92,246,0.25)"


def color_for(index: int) -> str:
    return PALETTE[index % len(PALETTE)]
