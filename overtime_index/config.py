"""Centralised configuration and constants."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path

# ── Paths ───────────────────────────────────────────────────────────────────
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

# ── Working hours ──────────────────────────────────────────────────────────
# Half-open hour range [start, end) on Mon-Fri, in the commit's own timezone.
WORK_START_HOUR: int = int(os.getenv("OVERTIME_WORK_START", "9"))
WORK_END_HOUR: int = int(os.getenv("OVERTIME_WORK_END", "18"))
WEEKEND_DAYS: frozenset[int] = frozenset({5, 6})  # date.weekday(): Sat, Sun

# ── Sample-size gates ──────────────────────────────────────────────────────
MIN_REPO_COMMITS: int = 20
MIN_AUTHOR_COMMITS: int = 5
MIN_TREND_MONTH_COMMITS: int = 5

# ── Index formula ──────────────────────────────────────────────────────────
INDEX_RATIO_MULTIPLIER: int = 3
FULL_DAY_HOURS: int = 9  # hours of activity expected from a saturated workday

# ── Ranking score ──────────────────────────────────────────────────────────
OVERTIME_WEIGHT_CAP: int = 50
OVERTIME_WEIGHT_DIVISOR: float = 5.0
COMMIT_FACTOR_LOG_DIVISOR: float = 2.0

# ── Time range defaults ────────────────────────────────────────────────────
DEFAULT_LOOKBACK_DAYS: int = 365
EPOCH_DATE: date = date(1970, 1, 1)
MIN_YEAR: int = 1970

# ── Data source ────────────────────────────────────────────────────────────
GIT_EXECUTABLE: str = os.getenv("OVERTIME_GIT", "git")
GIT_TIMEOUT: int = 120  # seconds
MAX_WORKERS: int = int(os.getenv("OVERTIME_MAX_WORKERS", "8"))
NOREPLY_MARKERS: tuple[str, ...] = ("noreply", "no-reply")
