"""Overtime ratio and composite "996" index.

With ``y`` working-hour commits, ``x`` overtime commits, ``m`` weekday
commits and ``n`` weekend commits (``y + x == m + n``):

    amended  = round_half_up(x + y * n / (m + n))
    ratio    = ceil(amended / (y + x) * 100)
    index    = 3 * ratio

When the ratio is zero and the commits occupy fewer than
``FULL_DAY_HOURS`` distinct hours of the day, the ratio used for the index
becomes ``ceil(active_hours / 9 * 100) - 100``. This is negative and marks
an under-saturated working day rather than an absence of overtime.

The index is a non-decreasing function of the ratio: every negative value
comes from ratio 0, and positive ratios scale by a positive constant.
"""

from __future__ import annotations

import math

from overtime_index.config import FULL_DAY_HOURS, INDEX_RATIO_MULTIPLIER
from overtime_index.models import BucketCounts, IndexResult, ParsedData


def _round_half_up(value: float) -> int:
    # round() would use banker's rounding (12.5 -> 12)
    return math.floor(value + 0.5)


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def overtime_ratio(counts: BucketCounts) -> int:
    """Weekend-corrected share of overtime commits, in percent (0-100).

    Returns 0 for an empty set of counts.
    """
    y, x = counts.working_hour, counts.overtime_hour
    m, n = counts.weekday, counts.weekend
    total = y + x
    if total == 0:
        return 0
    week_total = m + n
    amended = _round_half_up(x + y * n / week_total) if week_total > 0 else x
    # integer ceiling avoids 0.35 * 100 -> 35.000000000000004 style drift
    return min(100, _ceil_div(amended * 100, total))


def format_index(index_996: float) -> str:
    return f"{index_996:.2f}"


def compute_index(parsed: ParsedData) -> IndexResult:
    """Compute the :class:`IndexResult` for classified data.

    Callers must apply the minimum sample gate first; an empty data set
    raises ``ValueError``.
    """
    total = parsed.counts.total
    if total == 0:
        raise ValueError("Cannot compute an overtime index without commits")

    ratio = overtime_ratio(parsed.counts)
    index_ratio = ratio
    active = parsed.active_hours
    if ratio == 0 and 0 < active < FULL_DAY_HOURS:
        index_ratio = _ceil_div(active * 100, FULL_DAY_HOURS) - 100

    index_996 = float(index_ratio * INDEX_RATIO_MULTIPLIER)
    return IndexResult(
        index_996=index_996,
        index_996_display=format_index(index_996),
        overtime_ratio_percent=float(ratio),
    )


def validate_data(parsed: ParsedData) -> list[str]:
    """Return a list of consistency errors (empty when the data is sound)."""
    errors: list[str] = []
    counts = parsed.counts
    if not counts.is_consistent:
        errors.append(
            "Hour buckets and week buckets disagree: "
            f"{counts.working_hour}+{counts.overtime_hour} != {counts.weekday}+{counts.weekend}"
        )
    if parsed.total_commits != counts.total:
        errors.append(
            f"Total commits {parsed.total_commits} does not match bucket total {counts.total}"
        )
    if sum(parsed.hour_counts) != parsed.total_commits:
        errors.append("Hour histogram does not sum to the total commit count")
    if sum(parsed.weekday_counts) != parsed.total_commits:
        errors.append("Weekday histogram does not sum to the total commit count")
    if parsed.since and parsed.until and parsed.since > parsed.until:
        errors.append(f"Window start {parsed.since} is after window end {parsed.until}")
    return errors


def describe_index(index_996: float) -> str:
    """Short verdict for an index value."""
    if index_996 < 0:
        return "under-saturated: less than a full working day of activity"
    if index_996 <= 10:
        return "healthy: almost no overtime"
    if index_996 <= 50:
        return "moderate: some overtime"
    if index_996 <= 90:
        return "heavy: regular overtime"
    if index_996 <= 110:
        return "severe: roughly a 996 schedule"
    return "extreme: beyond a 996 schedule"
