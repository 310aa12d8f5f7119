"""Classify commits into working-hour and weekday buckets."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from overtime_index.config import WEEKEND_DAYS, WORK_END_HOUR, WORK_START_HOUR
from overtime_index.models import BucketCounts, Commit, HourBucket, ParsedData, WeekBucket


@dataclass(frozen=True)
class WorkHours:
    """Working hours as a half-open range ``[start, end)`` on weekdays."""

    start: int = WORK_START_HOUR
    end: int = WORK_END_HOUR

    def __post_init__(self) -> None:
        if not (0 <= self.start < self.end <= 24):
            raise ValueError(
                f"Invalid working hours {self.start}-{self.end}: need 0 <= start < end <= 24"
            )

    def contains(self, hour: int) -> bool:
        return self.start <= hour < self.end


DEFAULT_WORK_HOURS = WorkHours()


def is_weekend(commit: Commit) -> bool:
    """Saturday or Sunday in the commit's own timezone."""
    return commit.timestamp.weekday() in WEEKEND_DAYS


def classify(
    commit: Commit,
    work_hours: WorkHours = DEFAULT_WORK_HOURS,
) -> tuple[HourBucket, WeekBucket]:
    """Place *commit* in one cell of each partition.

    The hour dimension counts weekend commits as overtime whatever the
    hour. The week dimension looks only at the calendar day.
    """
    weekend = is_weekend(commit)
    week_bucket = WeekBucket.WEEKEND if weekend else WeekBucket.WEEKDAY
    if not weekend and work_hours.contains(commit.timestamp.hour):
        return HourBucket.WORKING, week_bucket
    return HourBucket.OVERTIME, week_bucket


def parse_commits(
    commits: Iterable[Commit],
    work_hours: WorkHours = DEFAULT_WORK_HOURS,
    since: date | None = None,
    until: date | None = None,
) -> ParsedData:
    """Classify every commit and build a :class:`ParsedData`."""
    working = overtime = weekday = weekend = 0
    hour_counts = [0] * 24
    weekday_counts = [0] * 7

    for commit in commits:
        hour_bucket, week_bucket = classify(commit, work_hours)
        if hour_bucket is HourBucket.WORKING:
            working += 1
        else:
            overtime += 1
        if week_bucket is WeekBucket.WEEKDAY:
            weekday += 1
        else:
            weekend += 1
        hour_counts[commit.timestamp.hour] += 1
        weekday_counts[commit.timestamp.weekday()] += 1

    counts = BucketCounts(
        working_hour=working,
        overtime_hour=overtime,
        weekday=weekday,
        weekend=weekend,
    )
    return ParsedData(
        counts=counts,
        total_commits=counts.total,
        since=since,
        until=until,
        hour_counts=tuple(hour_counts),
        weekday_counts=tuple(weekday_counts),
    )
