"""
Pie post-processing: merge low-share categories into one "Others" point.
"""
from typing import Sequence

from .aggregator import Series, SeriesPoint
from .config import ALL, ResultLimit

OTHERS_LABEL = "Others"


def collapse_minorities(
    series: Sequence[SeriesPoint],
    threshold: float,
    limit: ResultLimit = ALL,
    keep_others: bool = False,
) -> Series:
    """
    Points whose share of the total is below threshold are summed into "Others"
    (appended only when that sum is > 0), then the list is cut to limit.

    With the default keep_others=False the cut may drop "Others" when the
    primary categories alone fill the limit. keep_others=True reserves the
    last slot for it instead.
    """
    ordered = sorted(series, key=lambda p: p.value, reverse=True)
    total = sum(p.value for p in ordered) or 1

    primary = []
    others_sum = 0.0
    for p in ordered:
        if p.value / total < threshold:
            others_sum += p.value
        else:
            primary.append(p)

    has_others = others_sum > 0
    combined = primary + ([SeriesPoint(name=OTHERS_LABEL, value=others_sum)] if has_others else [])
    if limit == ALL or len(combined) <= limit:
        return combined
    if keep_others and has_others:
        return primary[: limit - 1] + [combined[-1]]
    return combined[:limit]
