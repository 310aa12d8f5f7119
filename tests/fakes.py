"""In-memory stand-ins for the git data source."""

from __future__ import annotations

import re
from collections import Counter
from datetime import date, datetime, timedelta, timezone

from overtime_index.models import AuthorIdentity, Commit

TZ = timezone(timedelta(hours=8))

# 2025-01-13 is a Monday; 2025-01-18 a Saturday.
MONDAY = date(2025, 1, 13)
SATURDAY = date(2025, 1, 18)


def make_commit(
    day: date = MONDAY,
    hour: int = 10,
    name: str = "alice",
    email: str = "alice@example.com",
    minute: int = 0,
) -> Commit:
    return Commit(
        timestamp=datetime(day.year, day.month, day.day, hour, minute, tzinfo=TZ),
        author_name=name,
        author_email=email,
    )


def make_commits(
    count: int,
    day: date = MONDAY,
    hours: tuple[int, ...] = (10,),
    name: str = "alice",
    email: str = "alice@example.com",
) -> list[Commit]:
    """*count* commits cycling through *hours* on *day*."""
    return [
        make_commit(day, hours[i % len(hours)], name, email, minute=i % 60)
        for i in range(count)
    ]


def _utc_date(commit: Commit) -> date:
    return commit.timestamp.astimezone(timezone.utc).date()


class FakeSource:
    """Answers data-source calls from a fixed list of commits."""

    def __init__(
        self,
        commits: list[Commit],
        me: AuthorIdentity | None = None,
        failing_emails: set[str] | None = None,
        last_commit_error: Exception | None = None,
    ) -> None:
        self.commits = commits
        self.me = me
        self.failing_emails = failing_emails or set()
        self.last_commit_error = last_commit_error
        self.calls: list[tuple] = []

    def _select(self, since, until, author_pattern):
        selected = []
        regex = re.compile(author_pattern, re.IGNORECASE) if author_pattern else None
        for c in self.commits:
            d = c.timestamp.date()
            if since is not None and d < since:
                continue
            if until is not None and d > until:
                continue
            if regex and not regex.search(f"{c.author_name} <{c.author_email}>"):
                continue
            selected.append(c)
        return selected

    def fetch_commits(self, path, since=None, until=None, author_pattern=None):
        self.calls.append(("fetch_commits", since, until, author_pattern))
        for email in self.failing_emails:
            if author_pattern and email in author_pattern.replace("\\", ""):
                raise RuntimeError(f"git log failed for {email}")
        return self._select(since, until, author_pattern)

    def count_commits(self, path, since=None, until=None, author_pattern=None):
        return len(self._select(since, until, author_pattern))

    def fetch_all_authors(self, path, since=None, until=None):
        counts = Counter(
            AuthorIdentity(c.author_name, c.author_email) for c in self._select(since, until, None)
        )
        return [identity for identity, _ in counts.most_common()]

    def fetch_last_commit_date(self, path):
        if self.last_commit_error is not None:
            raise self.last_commit_error
        return max((_utc_date(c) for c in self.commits), default=None)

    def fetch_first_commit_date(self, path):
        return min((_utc_date(c) for c in self.commits), default=None)

    def resolve_self_identity(self, path):
        if self.me is None:
            raise RuntimeError("no git user configured")
        return self.me
