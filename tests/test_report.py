"""Tests for the plain-text reports."""

from __future__ import annotations

from datetime import date

from fakes import MONDAY, SATURDAY, FakeSource, make_commits
from overtime_index.analysis import analyze_repository
from overtime_index.models import (
    AnalyzeOptions,
    AuthorIdentity,
    AuthorRankingResult,
    AuthorStats,
    SortMode,
    TimeRange,
    TimeRangeMode,
    TrendPoint,
    TrendResult,
)
from overtime_index.report import (
    format_analysis,
    format_ranking,
    format_summary,
    format_trend,
    ranking_dataframe,
)

WINDOW = TimeRange(TimeRangeMode.CUSTOM, date(2025, 1, 1), date(2025, 1, 31), "last 31 days")


def _make_stats(name: str, index_996: float, total: int, overtime: int, weekend: int = 0) -> AuthorStats:
    return AuthorStats(
        identity=AuthorIdentity(name, f"{name}@example.com"),
        total_commits=total,
        index_996=index_996,
        index_996_display=f"{index_996:.2f}",
        overtime_ratio_percent=float(overtime * 100 // total),
        working_hour_commits=total - overtime,
        overtime_commits=overtime,
        weekday_commits=total - weekend,
        weekend_commits=weekend,
    )


def _result(*authors: AuthorStats, sort_by: SortMode = SortMode.SCORE) -> AuthorRankingResult:
    return AuthorRankingResult(
        authors=list(authors), total_authors=len(authors), time_range=WINDOW, sort_by=sort_by
    )


def test_ranking_dataframe() -> None:
    df = ranking_dataframe(_result(
        _make_stats("alice", 105.0, 40, 10, weekend=5),
        _make_stats("carol", -198.0, 10, 0),
    ))
    assert list(df["rank"]) == [1, 2]
    assert list(df["author"]) == ["alice", "carol"]
    assert df.loc[0, "weekend_percent"] == 12.5
    assert df.loc[1, "score"] == -198.0


def test_format_ranking_table() -> None:
    text = format_ranking(_result(
        _make_stats("alice", 105.0, 40, 10),
        _make_stats("bob", 30.0, 120, 12),
        sort_by=SortMode.OVERTIME,
    ))
    assert "by overtime commits" in text
    assert "2025-01-01 to 2025-01-31 (last 31 days)" in text
    assert "Overtime" in text
    assert "alice@example.com" in text
    assert "Authors:        2" in text
    assert "Total commits:  160" in text
    assert "Highest index:  105.00 (alice)" in text
    assert "Sorted by absolute number of overtime commits" in text


def test_format_ranking_single_author_detail() -> None:
    text = format_ranking(_result(_make_stats("alice", 105.0, 40, 10)), single_author=True)
    assert "Verdict" in text
    assert "severe" in text
    assert "Legend" not in text


def test_format_ranking_empty() -> None:
    assert "No authors." in format_ranking(_result())
    assert format_summary([]) == "No authors."


def test_format_analysis() -> None:
    commits = make_commits(18, MONDAY, hours=tuple(range(9, 18))) + make_commits(2, SATURDAY)
    report = analyze_repository(FakeSource(commits), ".", AnalyzeOptions(all_time=True))
    assert report is not None
    text = format_analysis(report)
    assert "Total commits:   20" in text
    assert "Weekend:         2 (10.0%)" in text
    assert "  09:00      2 " in text
    assert text.count("\n  ") >= 24


def test_format_trend_marks_unscored_months() -> None:
    trend = TrendResult(
        since=date(2024, 12, 1),
        until=date(2025, 1, 31),
        points=[
            TrendPoint("2024-12", 3, 3, 0, 0, None, None),
            TrendPoint("2025-01", 20, 14, 6, 6, 40.0, 120.0),
        ],
    )
    text = format_trend(trend)
    assert "2024-12" in text
    assert text.splitlines()[4].rstrip().endswith("-")
    assert "Months: 2  Total commits: 23" in text
    assert "Peak: 120.0" in text
