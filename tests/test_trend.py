"""Tests for the monthly trend and the whole-repository analysis."""

from __future__ import annotations

from datetime import date

import pytest

from fakes import MONDAY, SATURDAY, FakeSource, make_commits
from overtime_index.analysis import analyze_repository, ensure_commit_samples
from overtime_index.author_filter import build_author_filter
from overtime_index.exceptions import GitCommandError
from overtime_index.git_source import email_pattern
from overtime_index.models import AnalyzeOptions, AuthorIdentity, TimeRange, TimeRangeMode
from overtime_index.trend import analyze_trend, build_trend, iter_months

TODAY = date(2025, 1, 20)
NOVEMBER = date(2024, 11, 4)


def _history() -> list:
    return (
        make_commits(12, NOVEMBER, hours=(10, 14, 21))
        + make_commits(3, date(2024, 12, 2), hours=(11,))
        + make_commits(14, MONDAY, hours=tuple(range(9, 18)))
        + make_commits(6, SATURDAY, hours=(16,), name="bob", email="bob@example.com")
    )


# ── Months ──────────────────────────────────────────────────────────────────


def test_iter_months_across_years() -> None:
    months = list(iter_months(date(2024, 11, 15), date(2025, 2, 1)))
    assert months == ["2024-11", "2024-12", "2025-01", "2025-02"]


def test_iter_months_single_month() -> None:
    assert list(iter_months(date(2025, 1, 1), date(2025, 1, 31))) == ["2025-01"]


def test_build_trend() -> None:
    trend = build_trend(_history(), date(2024, 10, 20), TODAY)
    by_month = {p.month: p for p in trend.points}

    assert list(by_month) == ["2024-10", "2024-11", "2024-12", "2025-01"]
    assert by_month["2024-10"].total_commits == 0
    assert by_month["2024-10"].index_996 is None

    # below the monthly floor: counts only
    december = by_month["2024-12"]
    assert december.total_commits == 3
    assert december.index_996 is None
    assert december.overtime_ratio_percent is None

    november = by_month["2024-11"]
    assert (november.working_hour_commits, november.overtime_commits) == (8, 4)
    assert november.index_996 is not None and november.index_996 > 0

    january = by_month["2025-01"]
    assert january.total_commits == 20
    assert january.weekend_commits == 6
    assert trend.total_commits == 35


# ── Trend pipeline ─────────────────────────────────────────────────────────


def test_analyze_trend_all_time_uses_history_bounds() -> None:
    trend = analyze_trend(FakeSource(_history()), ".", AnalyzeOptions(all_time=True), today=TODAY)
    assert trend is not None
    assert trend.since == NOVEMBER
    assert trend.until == SATURDAY
    assert [p.month for p in trend.points] == ["2024-11", "2024-12", "2025-01"]


def test_analyze_trend_all_time_on_empty_history() -> None:
    with pytest.raises(GitCommandError):
        analyze_trend(FakeSource([]), ".", AnalyzeOptions(all_time=True), today=TODAY)


def test_analyze_trend_small_sample() -> None:
    source = FakeSource(make_commits(10, MONDAY))
    assert analyze_trend(source, ".", AnalyzeOptions(days=30), today=TODAY) is None


def test_analyze_trend_for_one_author() -> None:
    history = _history() + make_commits(20, SATURDAY, hours=(20,), name="bob", email="bob@example.com")
    options = AnalyzeOptions(year="2025", author="bob")
    trend = analyze_trend(FakeSource(history), ".", options, today=TODAY)
    assert trend is not None
    assert trend.total_commits == 26
    january = next(p for p in trend.points if p.month == "2025-01")
    assert january.overtime_ratio_percent == 100.0


# ── Whole-repository analysis ───────────────────────────────────────────────


def test_ensure_commit_samples() -> None:
    source = FakeSource(make_commits(20, MONDAY))
    window = TimeRange(TimeRangeMode.CUSTOM, date(2025, 1, 1), TODAY)
    assert ensure_commit_samples(source, ".", window) is True
    assert ensure_commit_samples(source, ".", window, minimum=21) is False


def test_analyze_repository() -> None:
    report = analyze_repository(FakeSource(_history()), ".", AnalyzeOptions(all_time=True))
    assert report is not None
    assert report.parsed.total_commits == 35
    assert report.parsed.counts.is_consistent
    assert report.time_range.mode is TimeRangeMode.ALL_TIME
    assert report.author_label is None


def test_analyze_repository_too_few_commits() -> None:
    source = FakeSource(make_commits(19, MONDAY))
    assert analyze_repository(source, ".", AnalyzeOptions(days=30), today=TODAY) is None


def test_analyze_repository_self() -> None:
    me = AuthorIdentity("alice", "Alice@Example.com")
    source = FakeSource(_history(), me=me)
    report = analyze_repository(source, ".", AnalyzeOptions(all_time=True, self_only=True))
    assert report is not None
    assert report.parsed.total_commits == 29
    assert "alice" in report.author_label


def test_analyze_repository_excluding_everyone() -> None:
    source = FakeSource(_history())
    options = AnalyzeOptions(all_time=True, exclude_authors=["example.com"])
    assert analyze_repository(source, ".", options) is None


# ── Author filter ───────────────────────────────────────────────────────────


def test_author_regex_reaches_git_as_exact_emails() -> None:
    history = _history() + make_commits(5, MONDAY, name="dev1", email="dev1@example.com")
    window = TimeRange(TimeRangeMode.CUSTOM, date(2024, 11, 1), TODAY)

    author_filter = build_author_filter(FakeSource(history), ".", window, AnalyzeOptions(author=r"dev\d"))
    assert [i.name for i in author_filter.identities] == ["dev1"]
    assert author_filter.pattern == email_pattern("dev1@example.com")

    lookahead = build_author_filter(FakeSource(history), ".", window, AnalyzeOptions(author="(?=b)ob"))
    assert lookahead.pattern == email_pattern("bob@example.com")


def test_author_with_no_match_selects_nobody() -> None:
    window = TimeRange(TimeRangeMode.CUSTOM, date(2024, 11, 1), TODAY)
    author_filter = build_author_filter(FakeSource(_history()), ".", window, AnalyzeOptions(author="zed"))
    assert author_filter.identities == []
    assert author_filter.pattern is None


def test_trend_author_pattern_passed_to_source() -> None:
    history = _history() + make_commits(20, SATURDAY, hours=(20,), name="bob", email="bob@example.com")
    source = FakeSource(history)
    trend = analyze_trend(source, ".", AnalyzeOptions(year="2025", author=r"^b\w+"), today=TODAY)
    assert trend is not None
    assert trend.total_commits == 26
    assert source.calls[-1][3] == email_pattern("bob@example.com")
