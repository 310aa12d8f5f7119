"""Per-author ranking.

Each author's commits are fetched and scored independently on a thread
pool; the complete result set is collected before merging and sorting.

Composite score used by the default sort mode:
    score = index                                   if index < 0
    score = index * CommitFactor + OvertimeWeight   otherwise

Where:
    CommitFactor   = min(1, log10(max(1, total_commits)) / 2)
    OvertimeWeight = min(overtime_commits, 50) / 5
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path
from typing import Callable, Iterable

from overtime_index.analysis import ensure_commit_samples, resolve_range_for, wants_author_filter
from overtime_index.author_filter import build_author_filter
from overtime_index.classifier import DEFAULT_WORK_HOURS, WorkHours, parse_commits
from overtime_index.config import (
    COMMIT_FACTOR_LOG_DIVISOR,
    MAX_WORKERS,
    MIN_AUTHOR_COMMITS,
    OVERTIME_WEIGHT_CAP,
    OVERTIME_WEIGHT_DIVISOR,
)
from overtime_index.git_source import GitDataSource, email_pattern
from overtime_index.index import compute_index
from overtime_index.merger import build_merge_map, merge_author_stats
from overtime_index.models import (
    AnalyzeOptions,
    AuthorIdentity,
    AuthorRankingResult,
    AuthorStats,
    SortMode,
    TimeRange,
)

logger = logging.getLogger(__name__)


# ── Scoring ─────────────────────────────────────────────────────────────────

def commit_count_factor(total_commits: int) -> float:
    """Dampens the index for authors with few commits; reaches 1 at 100."""
    return min(1.0, math.log10(max(1, total_commits)) / COMMIT_FACTOR_LOG_DIVISOR)


def overtime_weight(overtime_commits: int) -> float:
    """Saturating bonus for absolute overtime volume (max 10)."""
    return min(overtime_commits, OVERTIME_WEIGHT_CAP) / OVERTIME_WEIGHT_DIVISOR


def ranking_score(stats: AuthorStats) -> float:
    """Composite sort key. Negative indexes pass through unchanged."""
    if stats.index_996 < 0:
        return stats.index_996
    return (
        stats.index_996 * commit_count_factor(stats.total_commits)
        + overtime_weight(stats.overtime_commits)
    )


_SORT_KEYS: dict[SortMode, Callable[[AuthorStats], float]] = {
    SortMode.INDEX: lambda s: s.index_996,
    SortMode.OVERTIME: lambda s: s.overtime_commits,
    SortMode.COMMITS: lambda s: s.total_commits,
    SortMode.SCORE: ranking_score,
}


def sort_authors(
    stats: Iterable[AuthorStats],
    sort_by: SortMode | str = SortMode.SCORE,
) -> list[AuthorStats]:
    """Sort descending by *sort_by*. Equal keys keep their input order."""
    mode = SortMode(sort_by)
    return sorted(stats, key=_SORT_KEYS[mode], reverse=True)


# ── Per-author statistics ───────────────────────────────────────────────────

def compute_author_stats(
    source: GitDataSource,
    path: str | Path,
    identity: AuthorIdentity,
    time_range: TimeRange,
    work_hours: WorkHours = DEFAULT_WORK_HOURS,
    min_commits: int = MIN_AUTHOR_COMMITS,
) -> AuthorStats | None:
    """Statistics for one identity, or ``None`` below *min_commits*."""
    commits = source.fetch_commits(
        path, time_range.since, time_range.until, email_pattern(identity.email)
    )
    # the email pattern also matches other names sharing this address
    commits = [
        c for c in commits
        if c.author_name == identity.name and c.author_email.lower() == identity.key
    ]
    if len(commits) < min_commits:
        logger.debug("Skipping %s: %d commits (< %d)", identity, len(commits), min_commits)
        return None

    parsed = parse_commits(commits, work_hours, time_range.since, time_range.until)
    result = compute_index(parsed)
    return AuthorStats(
        identity=identity,
        total_commits=parsed.total_commits,
        index_996=result.index_996,
        index_996_display=result.index_996_display,
        overtime_ratio_percent=result.overtime_ratio_percent,
        working_hour_commits=parsed.counts.working_hour,
        overtime_commits=parsed.counts.overtime_hour,
        weekday_commits=parsed.counts.weekday,
        weekend_commits=parsed.counts.weekend,
    )


def collect_author_stats(
    source: GitDataSource,
    path: str | Path,
    identities: list[AuthorIdentity],
    time_range: TimeRange,
    work_hours: WorkHours = DEFAULT_WORK_HOURS,
    min_commits: int = MIN_AUTHOR_COMMITS,
    max_workers: int = MAX_WORKERS,
) -> list[AuthorStats]:
    """Analyze every identity concurrently; results keep *identities* order.

    An author whose analysis raises is logged and dropped.
    """

    def _analyze(identity: AuthorIdentity) -> AuthorStats | None:
        try:
            return compute_author_stats(
                source, path, identity, time_range, work_hours, min_commits
            )
        except Exception as exc:  # one author's failure must not abort the batch
            logger.warning("Could not analyze author %s: %s", identity, exc)
            return None

    if not identities:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(identities)))) as pool:
        results = list(pool.map(_analyze, identities))

    stats = [s for s in results if s is not None]
    logger.info("Analyzed %d/%d authors", len(stats), len(identities))
    return stats


# ── Ranking pipeline ───────────────────────────────────────────────────────

def rank_authors(
    source: GitDataSource,
    path: str | Path,
    options: AnalyzeOptions,
    work_hours: WorkHours = DEFAULT_WORK_HOURS,
    today: date | None = None,
) -> AuthorRankingResult | None:
    """Resolve the window, score every author and sort.

    Returns ``None`` when the repository sample is too small or no author
    is left to rank.
    """
    time_range = resolve_range_for(source, path, options, today)
    logger.info("Ranking authors of %s over %s", path, time_range.describe())

    if not ensure_commit_samples(source, path, time_range, label="ranking"):
        return None

    if wants_author_filter(options):
        author_filter = build_author_filter(source, path, time_range, options)
        for line in author_filter.info_lines:
            logger.info(line)
        identities = author_filter.identities
    else:
        identities = source.fetch_all_authors(path, time_range.since, time_range.until)

    if not identities:
        logger.warning("No authors left after filtering")
        return None
    logger.info("Matched %d authors", len(identities))

    stats = collect_author_stats(source, path, identities, time_range, work_hours)
    if not stats:
        logger.warning(
            "No author has at least %d commits in %s", MIN_AUTHOR_COMMITS, time_range.describe()
        )
        return None

    if options.merge:
        stats = merge_author_stats(stats, build_merge_map(identities))
        logger.info("Merged identities; %d authors remain", len(stats))

    ranked = sort_authors(stats, options.sort_by)
    return AuthorRankingResult(
        authors=ranked,
        total_authors=len(ranked),
        time_range=time_range,
        sort_by=SortMode(options.sort_by),
    )
