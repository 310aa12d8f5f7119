"""Domain models for commit-time analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class TimeRangeMode(str, Enum):
    """How the analysis window was chosen."""

    ALL_TIME = "all-time"
    CUSTOM = "custom"
    AUTO_LAST_COMMIT = "auto-last-commit"
    FALLBACK = "fallback"


class SortMode(str, Enum):
    """Ranking order. All modes sort descending."""

    INDEX = "index"
    OVERTIME = "overtime"
    COMMITS = "commits"
    SCORE = "score"


class HourBucket(str, Enum):
    WORKING = "working"
    OVERTIME = "overtime"


class WeekBucket(str, Enum):
    WEEKDAY = "weekday"
    WEEKEND = "weekend"


@dataclass(frozen=True)
class Commit:
    """A single commit as reported by the data source."""

    timestamp: datetime  # timezone-aware, in the author's own offset
    author_name: str
    author_email: str


@dataclass(frozen=True)
class AuthorIdentity:
    """A distinct (name, email) pair seen in the history."""

    name: str
    email: str

    @property
    def key(self) -> str:
        """Case-insensitive email used to match identities."""
        return self.email.lower()

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True)
class BucketCounts:
    """Commit counts for the hour partition and the week partition."""

    working_hour: int = 0
    overtime_hour: int = 0
    weekday: int = 0
    weekend: int = 0

    @property
    def total(self) -> int:
        return self.working_hour + self.overtime_hour

    @property
    def is_consistent(self) -> bool:
        """Both partitions must cover the same commits."""
        return self.working_hour + self.overtime_hour == self.weekday + self.weekend

    def __add__(self, other: BucketCounts) -> BucketCounts:
        return BucketCounts(
            working_hour=self.working_hour + other.working_hour,
            overtime_hour=self.overtime_hour + other.overtime_hour,
            weekday=self.weekday + other.weekday,
            weekend=self.weekend + other.weekend,
        )


@dataclass(frozen=True)
class ParsedData:
    """Classified commit statistics for one analysis run."""

    counts: BucketCounts
    total_commits: int
    since: date | None = None
    until: date | None = None
    hour_counts: tuple[int, ...] = (0,) * 24
    weekday_counts: tuple[int, ...] = (0,) * 7  # Monday first

    @property
    def active_hours(self) -> int:
        """Number of distinct hours of the day with at least one commit."""
        return sum(1 for c in self.hour_counts if c > 0)


@dataclass(frozen=True)
class IndexResult:
    """Composite overtime index and weekend-corrected overtime ratio."""

    index_996: float
    index_996_display: str
    overtime_ratio_percent: float


@dataclass
class AuthorStats:
    """Per-author statistics for one analysis run."""

    identity: AuthorIdentity
    total_commits: int
    index_996: float
    index_996_display: str
    overtime_ratio_percent: float
    working_hour_commits: int
    overtime_commits: int
    weekday_commits: int
    weekend_commits: int

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def email(self) -> str:
        return self.identity.email

    @property
    def counts(self) -> BucketCounts:
        return BucketCounts(
            working_hour=self.working_hour_commits,
            overtime_hour=self.overtime_commits,
            weekday=self.weekday_commits,
            weekend=self.weekend_commits,
        )

    @property
    def weekend_percent(self) -> float:
        if self.total_commits == 0:
            return 0.0
        return self.weekend_commits / self.total_commits * 100


@dataclass(frozen=True)
class TimeRange:
    """Resolved analysis window. Bounds are absent only in all-time mode."""

    mode: TimeRangeMode
    since: date | None = None
    until: date | None = None
    note: str | None = None

    @property
    def is_bounded(self) -> bool:
        return self.since is not None and self.until is not None

    def describe(self) -> str:
        if not self.is_bounded:
            return "all time"
        text = f"{self.since.isoformat()} to {self.until.isoformat()}"
        return f"{text} ({self.note})" if self.note else text


@dataclass
class AuthorRankingResult:
    """Sorted per-author statistics handed to the report layer."""

    authors: list[AuthorStats]
    total_authors: int
    time_range: TimeRange
    sort_by: SortMode = SortMode.SCORE


@dataclass
class AnalyzeOptions:
    """Every option that shapes an analysis run.

    ``days`` and ``year`` keep the raw user text; they are validated when
    the time range is resolved.
    """

    all_time: bool = False
    days: int | str | None = None
    year: str | None = None
    since: date | None = None
    until: date | None = None
    self_only: bool = False
    author: str | None = None
    exclude_authors: list[str] = field(default_factory=list)
    merge: bool = False
    sort_by: SortMode = SortMode.SCORE


@dataclass(frozen=True)
class TrendPoint:
    """Index statistics for one calendar month."""

    month: str  # YYYY-MM
    total_commits: int
    working_hour_commits: int
    overtime_commits: int
    weekend_commits: int
    overtime_ratio_percent: float | None
    index_996: float | None


@dataclass
class TrendResult:
    """Month-by-month trend over a window."""

    since: date
    until: date
    points: list[TrendPoint] = field(default_factory=list)

    @property
    def total_commits(self) -> int:
        return sum(p.total_commits for p in self.points)


@dataclass
class AnalysisReport:
    """Result of a whole-repository analysis."""

    parsed: ParsedData
    result: IndexResult
    time_range: TimeRange
    author_label: str | None = None
