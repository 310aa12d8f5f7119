"""Command-line interface: ``analyze``, ``ranking`` and ``trend``."""

from __future__ import annotations

import argparse
import logging
import sys

from overtime_index import __version__
from overtime_index.analysis import analyze_repository
from overtime_index.author_filter import parse_exclude_list
from overtime_index.classifier import WorkHours
from overtime_index.config import WORK_END_HOUR, WORK_START_HOUR
from overtime_index.exceptions import OptionError
from overtime_index.git_source import GitDataSource
from overtime_index.models import AnalyzeOptions, SortMode
from overtime_index.ranking import rank_authors
from overtime_index.report import format_analysis, format_ranking, format_trend
from overtime_index.time_range import parse_date
from overtime_index.trend import analyze_trend

logger = logging.getLogger(__name__)

PROG = "overtime_index"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", nargs="?", default=".", help="Repository path (default: .)")
    window = parser.add_argument_group("time range")
    window.add_argument("--all-time", action="store_true", help="Analyze the whole history")
    window.add_argument("--days", help="The N most recent days, today included")
    window.add_argument("--year", help="A year (2025) or a range of years (2023-2025)")
    window.add_argument("--since", help="Start date, YYYY-MM-DD")
    window.add_argument("--until", help="End date, YYYY-MM-DD")
    parser.add_argument("--self", dest="self_only", action="store_true",
                        help="Only the configured git user's commits")
    parser.add_argument("--work-start", type=int, default=WORK_START_HOUR,
                        help=f"First working hour (default: {WORK_START_HOUR})")
    parser.add_argument("--work-end", type=int, default=WORK_END_HOUR,
                        help=f"Hour when working time ends (default: {WORK_END_HOUR})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def _add_author_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--author", help="Case-insensitive pattern matched against name or email")
    parser.add_argument("--exclude-authors", help="Comma-separated names or emails to leave out")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Overtime index of a git repository from commit timestamps.",
    )
    parser.add_argument("--version", action="version", version=f"{PROG} v{__version__}")
    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Overtime index of the whole repository")
    _add_common_arguments(analyze)
    _add_author_arguments(analyze)

    ranking = sub.add_parser("ranking", help="Rank authors by overtime")
    _add_common_arguments(ranking)
    _add_author_arguments(ranking)
    ranking.add_argument("--merge", action="store_true",
                         help="Merge identities with the same name or email")
    ranking.add_argument("--by", dest="sort_by", choices=[m.value for m in SortMode],
                         default=SortMode.SCORE.value, help="Sort mode (default: score)")

    trend = sub.add_parser("trend", help="Monthly overtime trend")
    _add_common_arguments(trend)
    _add_author_arguments(trend)
    return parser


def options_from_args(args: argparse.Namespace) -> AnalyzeOptions:
    """Build :class:`AnalyzeOptions`; malformed dates raise ``OptionError``."""
    return AnalyzeOptions(
        all_time=args.all_time,
        days=args.days,
        year=args.year,
        since=parse_date(args.since, "--since") if args.since else None,
        until=parse_date(args.until, "--until") if args.until else None,
        self_only=args.self_only,
        author=getattr(args, "author", None),
        exclude_authors=parse_exclude_list(getattr(args, "exclude_authors", None)),
        merge=getattr(args, "merge", False),
        sort_by=SortMode(getattr(args, "sort_by", SortMode.SCORE.value)),
    )


def run(args: argparse.Namespace, source: GitDataSource | None = None) -> int:
    """Execute a parsed command. Returns the process exit code."""
    source = source or GitDataSource()
    try:
        options = options_from_args(args)
        work_hours = WorkHours(args.work_start, args.work_end)
    except ValueError as exc:  # OptionError or invalid working hours
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        if args.command == "analyze":
            report = analyze_repository(source, args.path, options, work_hours)
            if report is not None:
                print(format_analysis(report))
        elif args.command == "ranking":
            result = rank_authors(source, args.path, options, work_hours)
            if result is not None:
                print(format_ranking(result, single_author=bool(options.author)))
        else:
            trend = analyze_trend(source, args.path, options, work_hours)
            if trend is not None:
                print(format_trend(trend))
    except OptionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.debug("Unhandled error", exc_info=True)
        print(f"{args.command} failed: {exc}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        print(f"{PROG} v{__version__}\n")
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    return run(args)
