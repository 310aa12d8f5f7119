"""Resolve the analysis window from user options.

Priority, first match wins:
    1. ``--all-time``            unbounded
    2. ``--days N``              the N most recent whole days ending today
    3. ``--year YYYY[-YYYY]``    whole calendar years
    4. ``--since`` / ``--until`` given side(s), the other side defaulted
    5. last commit date          365 days back from the newest commit
    6. fallback                  365 days back from today

All arithmetic is on UTC calendar dates, never on local wall-clock time.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable

from overtime_index.config import DEFAULT_LOOKBACK_DAYS, EPOCH_DATE, MIN_YEAR
from overtime_index.exceptions import OptionError
from overtime_index.models import AnalyzeOptions, TimeRange, TimeRangeMode

logger = logging.getLogger(__name__)

LastCommitDateProvider = Callable[[], date | None]

_YEAR_RANGE_RE = re.compile(r"^(\d{4})-(\d{4})$")
_YEAR_RE = re.compile(r"^(\d{4})$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

AUTO_LAST_COMMIT_NOTE = f"{DEFAULT_LOOKBACK_DAYS} days back from the last commit"


def utc_today() -> date:
    """Today's date on the UTC calendar."""
    return datetime.now(timezone.utc).date()


def parse_date(value: str, option: str = "date") -> date:
    """Parse a strict ``YYYY-MM-DD`` string."""
    text = value.strip()
    if not _DATE_RE.match(text):
        raise OptionError(option, f"expected YYYY-MM-DD, got {value!r}")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise OptionError(option, f"invalid date {value!r}") from exc


def _parse_days(days: int | str) -> int:
    if isinstance(days, bool):
        raise OptionError("--days", "expected a positive integer")
    if isinstance(days, int):
        value = days
    else:
        text = str(days).strip()
        if not re.fullmatch(r"[+-]?\d+", text):
            raise OptionError("--days", f"expected a positive integer, got {days!r}")
        value = int(text)
    if value <= 0:
        raise OptionError("--days", f"expected a positive integer, got {days!r}")
    return value


def calculate_days_range(
    days: int | str,
    today: date | None = None,
) -> tuple[date, date]:
    """Return ``(since, until)`` covering the *days* most recent days.

    Today counts as the first day, so ``days=7`` on 2025-01-15 yields
    2025-01-09 .. 2025-01-15.
    """
    n = _parse_days(days)
    until = today or utc_today()
    since = until - timedelta(days=n - 1)
    return since, until


def parse_year_option(value: str) -> tuple[date, date, str]:
    """Parse ``YYYY`` or ``YYYY-YYYY`` into whole-year bounds and a note."""
    text = value.strip()

    range_match = _YEAR_RANGE_RE.match(text)
    if range_match:
        start, end = int(range_match.group(1)), int(range_match.group(2))
        if start < MIN_YEAR or end < MIN_YEAR or start > end:
            raise OptionError(
                "--year",
                f"start year must not exceed end year and both must be >= {MIN_YEAR}",
            )
        return date(start, 1, 1), date(end, 12, 31), f"{start}-{end}"

    single_match = _YEAR_RE.match(text)
    if single_match:
        year = int(single_match.group(1))
        if year < MIN_YEAR:
            raise OptionError("--year", f"year must be >= {MIN_YEAR}")
        return date(year, 1, 1), date(year, 12, 31), str(year)

    raise OptionError("--year", f"use YYYY (e.g. 2025) or YYYY-YYYY (e.g. 2023-2025), got {value!r}")


def default_range(today: date | None = None) -> tuple[date, date]:
    """``DEFAULT_LOOKBACK_DAYS`` back from today."""
    until = today or utc_today()
    return until - timedelta(days=DEFAULT_LOOKBACK_DAYS), until


def resolve_time_range(
    options: AnalyzeOptions,
    last_commit_date: LastCommitDateProvider | None = None,
    today: date | None = None,
) -> TimeRange:
    """Turn *options* into a concrete :class:`TimeRange`.

    ``OptionError`` propagates for malformed ``days``/``year`` values.
    Failures of *last_commit_date* fall through to the fallback tier.
    """
    today = today or utc_today()

    if options.all_time:
        return TimeRange(mode=TimeRangeMode.ALL_TIME)

    if options.days is not None:
        n = _parse_days(options.days)
        since, until = calculate_days_range(n, today)
        return TimeRange(
            mode=TimeRangeMode.CUSTOM,
            since=since,
            until=until,
            note=f"last {n} day{'s' if n != 1 else ''}",
        )

    if options.year:
        since, until, note = parse_year_option(options.year)
        return TimeRange(mode=TimeRangeMode.CUSTOM, since=since, until=until, note=note)

    if options.since or options.until:
        fallback_since, fallback_until = default_range(today)
        return TimeRange(
            mode=TimeRangeMode.CUSTOM,
            since=options.since or fallback_since,
            until=options.until or fallback_until,
        )

    if last_commit_date is not None:
        try:
            last = last_commit_date()
        except Exception as exc:  # any lookup failure drops to the fallback tier
            logger.debug("Last commit date lookup failed: %s", exc)
            last = None
        if last is not None:
            since = max(last - timedelta(days=DEFAULT_LOOKBACK_DAYS), EPOCH_DATE)
            return TimeRange(
                mode=TimeRangeMode.AUTO_LAST_COMMIT,
                since=since,
                until=last,
                note=AUTO_LAST_COMMIT_NOTE,
            )

    since, until = default_range(today)
    return TimeRange(mode=TimeRangeMode.FALLBACK, since=since, until=until)
