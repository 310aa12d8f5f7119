"""Month-by-month overtime trend."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator

from overtime_index.analysis import ensure_commit_samples, resolve_range_for, wants_author_filter
from overtime_index.author_filter import build_author_filter
from overtime_index.classifier import DEFAULT_WORK_HOURS, WorkHours, parse_commits
from overtime_index.config import MIN_TREND_MONTH_COMMITS
from overtime_index.exceptions import GitCommandError
from overtime_index.git_source import GitDataSource
from overtime_index.index import compute_index
from overtime_index.models import (
    AnalyzeOptions,
    Commit,
    TimeRange,
    TimeRangeMode,
    TrendPoint,
    TrendResult,
)

logger = logging.getLogger(__name__)


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def iter_months(since: date, until: date) -> Iterator[str]:
    """Yield ``YYYY-MM`` for every calendar month touching ``[since, until]``."""
    year, month = since.year, since.month
    while (year, month) <= (until.year, until.month):
        yield f"{year:04d}-{month:02d}"
        month += 1
        if month > 12:
            year, month = year + 1, 1


def build_trend(
    commits: Iterable[Commit],
    since: date,
    until: date,
    work_hours: WorkHours = DEFAULT_WORK_HOURS,
    min_commits: int = MIN_TREND_MONTH_COMMITS,
) -> TrendResult:
    """Bucket *commits* by calendar month and score each month.

    Months with fewer than *min_commits* commits report counts but no index.
    """
    by_month: dict[str, list[Commit]] = defaultdict(list)
    for commit in commits:
        by_month[month_key(commit.timestamp.date())].append(commit)

    points: list[TrendPoint] = []
    for month in iter_months(since, until):
        parsed = parse_commits(by_month.get(month, []), work_hours)
        ratio: float | None = None
        index: float | None = None
        if parsed.total_commits >= min_commits and parsed.total_commits > 0:
            result = compute_index(parsed)
            ratio, index = result.overtime_ratio_percent, result.index_996
        points.append(TrendPoint(
            month=month,
            total_commits=parsed.total_commits,
            working_hour_commits=parsed.counts.working_hour,
            overtime_commits=parsed.counts.overtime_hour,
            weekend_commits=parsed.counts.weekend,
            overtime_ratio_percent=ratio,
            index_996=index,
        ))

    return TrendResult(since=since, until=until, points=points)


def _bounded_range(source: GitDataSource, path: str | Path, time_range: TimeRange) -> TimeRange:
    if time_range.mode is not TimeRangeMode.ALL_TIME:
        return time_range
    first = source.fetch_first_commit_date(path)
    last = source.fetch_last_commit_date(path)
    if first is None or last is None:
        raise GitCommandError("Cannot determine the commit history range of the repository")
    return TimeRange(mode=TimeRangeMode.ALL_TIME, since=first, until=last, note="whole history")


def analyze_trend(
    source: GitDataSource,
    path: str | Path,
    options: AnalyzeOptions,
    work_hours: WorkHours = DEFAULT_WORK_HOURS,
    today: date | None = None,
) -> TrendResult | None:
    """Monthly trend for the resolved window, or ``None`` on a small sample."""
    time_range = _bounded_range(source, path, resolve_range_for(source, path, options, today))
    logger.info("Trend analysis of %s over %s", path, time_range.describe())

    pattern: str | None = None
    if wants_author_filter(options):
        author_filter = build_author_filter(source, path, time_range, options)
        for line in author_filter.info_lines:
            logger.info(line)
        if not author_filter.identities:
            logger.warning("No authors left after filtering")
            return None
        pattern = author_filter.pattern

    if not ensure_commit_samples(source, path, time_range, pattern, label="trend analysis"):
        return None

    commits = source.fetch_commits(path, time_range.since, time_range.until, pattern)
    return build_trend(commits, time_range.since, time_range.until, work_hours)
