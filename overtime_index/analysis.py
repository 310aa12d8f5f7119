"""Whole-repository analysis pipeline."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from overtime_index.author_filter import AuthorFilter, build_author_filter
from overtime_index.classifier import DEFAULT_WORK_HOURS, WorkHours, parse_commits
from overtime_index.config import MIN_REPO_COMMITS
from overtime_index.git_source import GitDataSource
from overtime_index.index import compute_index, validate_data
from overtime_index.models import AnalysisReport, AnalyzeOptions, TimeRange
from overtime_index.time_range import resolve_time_range

logger = logging.getLogger(__name__)


def ensure_commit_samples(
    source: GitDataSource,
    path: str | Path,
    time_range: TimeRange,
    author_pattern: str | None = None,
    minimum: int = MIN_REPO_COMMITS,
    label: str = "analysis",
) -> bool:
    """Return False (and log why) when the window holds too few commits."""
    count = source.count_commits(path, time_range.since, time_range.until, author_pattern)
    if count < minimum:
        logger.warning(
            "Only %d commits in %s; %s needs at least %d. "
            "Widen the window with --days, --year, --since/--until or --all-time.",
            count,
            time_range.describe(),
            label,
            minimum,
        )
        return False
    logger.debug("%d commits available for %s", count, label)
    return True


def wants_author_filter(options: AnalyzeOptions) -> bool:
    return bool(options.self_only or options.author or options.exclude_authors)


def resolve_range_for(
    source: GitDataSource,
    path: str | Path,
    options: AnalyzeOptions,
    today: date | None = None,
) -> TimeRange:
    """Resolve the window, using *source* for the last-commit tier."""
    return resolve_time_range(
        options,
        last_commit_date=lambda: source.fetch_last_commit_date(path),
        today=today,
    )


def analyze_repository(
    source: GitDataSource,
    path: str | Path,
    options: AnalyzeOptions,
    work_hours: WorkHours = DEFAULT_WORK_HOURS,
    today: date | None = None,
) -> AnalysisReport | None:
    """Compute the overtime index of the whole repository (or a filtered author set).

    Returns ``None`` when the sample is too small or no author matches.
    """
    time_range = resolve_range_for(source, path, options, today)
    logger.info("Analyzing %s over %s", path, time_range.describe())

    author_filter: AuthorFilter | None = None
    if wants_author_filter(options):
        author_filter = build_author_filter(source, path, time_range, options)
        for line in author_filter.info_lines:
            logger.info(line)
        if not author_filter.identities:
            logger.warning("No authors left after filtering")
            return None
    pattern = author_filter.pattern if author_filter else None

    if not ensure_commit_samples(source, path, time_range, pattern, label="analysis"):
        return None

    commits = source.fetch_commits(path, time_range.since, time_range.until, pattern)
    parsed = parse_commits(commits, work_hours, time_range.since, time_range.until)

    errors = validate_data(parsed)
    if errors:
        raise ValueError("Data validation failed: " + "; ".join(errors))

    result = compute_index(parsed)
    logger.info(
        "Index %s, overtime ratio %d%% over %d commits",
        result.index_996_display,
        result.overtime_ratio_percent,
        parsed.total_commits,
    )
    label = "; ".join(author_filter.info_lines) if author_filter else None
    return AnalysisReport(parsed=parsed, result=result, time_range=time_range, author_label=label)
