"""Plain-text reports for analysis, ranking and trend results."""

from __future__ import annotations

import pandas as pd

from overtime_index.index import describe_index
from overtime_index.models import (
    AnalysisReport,
    AuthorRankingResult,
    AuthorStats,
    SortMode,
    TrendResult,
)
from overtime_index.ranking import ranking_score

RULE = "-" * 60

_SORT_TITLES: dict[SortMode, str] = {
    SortMode.INDEX: "by overtime index",
    SortMode.OVERTIME: "by overtime commits",
    SortMode.COMMITS: "by total commits",
    SortMode.SCORE: "by composite score",
}

_SORT_HINTS: dict[SortMode, str] = {
    SortMode.INDEX: "Sorted by overtime index (share of overtime work)",
    SortMode.OVERTIME: "Sorted by absolute number of overtime commits",
    SortMode.COMMITS: "Sorted by total commits",
    SortMode.SCORE: "Sorted by composite score (balances overtime share and volume)",
}


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


# ── DataFrames (shared with the dashboard) ─────────────────────────────────

def ranking_dataframe(result: AuthorRankingResult) -> pd.DataFrame:
    """One row per ranked author, in rank order."""
    rows = [
        {
            "rank": i,
            "author": a.name,
            "email": a.email,
            "commits": a.total_commits,
            "working_hour_commits": a.working_hour_commits,
            "overtime_commits": a.overtime_commits,
            "index_996": round(a.index_996, 2),
            "overtime_ratio": a.overtime_ratio_percent,
            "weekend_percent": round(a.weekend_percent, 1),
            "score": round(ranking_score(a), 2),
        }
        for i, a in enumerate(result.authors, 1)
    ]
    return pd.DataFrame(rows)


def trend_dataframe(trend: TrendResult) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "month": p.month,
                "commits": p.total_commits,
                "working_hour_commits": p.working_hour_commits,
                "overtime_commits": p.overtime_commits,
                "weekend_commits": p.weekend_commits,
                "overtime_ratio": p.overtime_ratio_percent,
                "index_996": p.index_996,
            }
            for p in trend.points
        ]
    )


# ── Ranking ─────────────────────────────────────────────────────────────────

def format_ranking(result: AuthorRankingResult, single_author: bool = False) -> str:
    """Ranking table, summary and legend.

    With *single_author* and exactly one author, renders the detail view.
    """
    sort_by = SortMode(result.sort_by)
    lines = [
        f"Overtime ranking ({_SORT_TITLES[sort_by]})",
        f"Time range: {result.time_range.describe()}",
        "",
    ]

    if single_author and len(result.authors) == 1:
        lines.append(format_author_detail(result.authors[0]))
        return "\n".join(lines)

    df = ranking_dataframe(result)
    if df.empty:
        lines.append("No authors.")
        return "\n".join(lines)
    main_column = "overtime_commits" if sort_by is SortMode.OVERTIME else "commits"
    main_label = "Overtime" if sort_by is SortMode.OVERTIME else "Commits"
    table = pd.DataFrame({
        "Rank": df["rank"],
        "Author": df["author"].map(lambda s: _truncate(s, 18)),
        "Email": df["email"].map(lambda s: _truncate(s, 28)),
        main_label: df[main_column],
        "Index": df["index_996"].map(lambda v: f"{v:.1f}"),
        "Overtime %": df["overtime_ratio"].map(lambda v: f"{v:.1f}%"),
        "Weekend %": df["weekend_percent"].map(lambda v: f"{v:.1f}%"),
    })
    lines.append(table.to_string(index=False))
    lines.append("")
    lines.append(format_summary(result.authors, _SORT_TITLES[sort_by]))
    lines.append("")
    lines.append(format_legend(sort_by))
    return "\n".join(lines)


def format_author_detail(author: AuthorStats) -> str:
    details = [
        ("Author", author.name),
        ("Email", author.email),
        ("Total commits", author.total_commits),
        ("Overtime index", f"{author.index_996:.1f} ({author.index_996_display})"),
        ("Overtime ratio", f"{author.overtime_ratio_percent:.1f}%"),
        ("Working-hour commits", author.working_hour_commits),
        ("Overtime commits", author.overtime_commits),
        ("Weekday commits", author.weekday_commits),
        ("Weekend commits", f"{author.weekend_commits} ({author.weekend_percent:.1f}%)"),
        ("Verdict", describe_index(author.index_996)),
    ]
    width = max(len(k) for k, _ in details)
    return "\n".join(f"  {k:<{width}}  {v}" for k, v in details)


def format_summary(authors: list[AuthorStats], title: str = "") -> str:
    if not authors:
        return "No authors."
    total = sum(a.total_commits for a in authors)
    avg = sum(a.index_996 for a in authors) / len(authors)
    # first author wins ties, matching the ranked order
    top = max(authors, key=lambda a: a.index_996)
    bottom = min(authors, key=lambda a: a.index_996)
    header = f"Summary ({title})" if title else "Summary"
    return "\n".join([
        header,
        RULE,
        f"  Authors:        {len(authors)}",
        f"  Total commits:  {total}",
        f"  Average index:  {avg:.2f}",
        f"  Highest index:  {top.index_996:.2f} ({top.name})",
        f"  Lowest index:   {bottom.index_996:.2f} ({bottom.name})",
    ])


def format_legend(sort_by: SortMode) -> str:
    return "\n".join([
        "Legend",
        RULE,
        "  Index: composite work-intensity score; higher means more overtime",
        "  Overtime %: weekend-corrected share of commits outside working hours",
        "  Weekend %: share of commits made on Saturday or Sunday",
        f"  {_SORT_HINTS[SortMode(sort_by)]}",
    ])


# ── Single repository analysis ──────────────────────────────────────────────

def format_analysis(report: AnalysisReport) -> str:
    parsed, result = report.parsed, report.result
    counts = parsed.counts
    total = parsed.total_commits
    lines = [
        "Overtime analysis",
        RULE,
        f"  Time range:      {report.time_range.describe()}",
    ]
    if report.author_label:
        lines.append(f"  Authors:         {report.author_label}")
    lines += [
        f"  Total commits:   {total}",
        f"  Overtime index:  {result.index_996_display}",
        f"  Overtime ratio:  {result.overtime_ratio_percent:.0f}%",
        f"  Verdict:         {describe_index(result.index_996)}",
        "",
        "Work time",
        RULE,
        f"  Working hours:   {counts.working_hour} ({counts.working_hour / total:.1%})",
        f"  Overtime:        {counts.overtime_hour} ({counts.overtime_hour / total:.1%})",
        f"  Weekdays:        {counts.weekday} ({counts.weekday / total:.1%})",
        f"  Weekend:         {counts.weekend} ({counts.weekend / total:.1%})",
        "",
        "Commits by hour",
        RULE,
    ]
    peak = max(parsed.hour_counts) or 1
    for hour, count in enumerate(parsed.hour_counts):
        bar = "#" * round(count / peak * 40)
        lines.append(f"  {hour:02d}:00 {count:6d} {bar}")
    return "\n".join(lines)


# ── Trend ───────────────────────────────────────────────────────────────────

def format_trend(trend: TrendResult) -> str:
    df = trend_dataframe(trend)
    table = pd.DataFrame({
        "Month": df["month"],
        "Commits": df["commits"],
        "Overtime": df["overtime_commits"],
        "Weekend": df["weekend_commits"],
        "Overtime %": df["overtime_ratio"].map(lambda v: "-" if pd.isna(v) else f"{v:.0f}%"),
        "Index": df["index_996"].map(lambda v: "-" if pd.isna(v) else f"{v:.1f}"),
    })
    scored = [p.index_996 for p in trend.points if p.index_996 is not None]
    lines = [
        "Monthly trend",
        f"Time range: {trend.since.isoformat()} to {trend.until.isoformat()}",
        "",
        table.to_string(index=False),
        "",
        f"  Months: {len(trend.points)}  Total commits: {trend.total_commits}",
    ]
    if scored:
        lines.append(
            f"  Average index: {sum(scored) / len(scored):.2f}  "
            f"Peak: {max(scored):.1f}  Low: {min(scored):.1f}"
        )
    return "\n".join(lines)
