"""Commit data source backed by the ``git`` executable."""

from __future__ import annotations

import logging
import re
import subprocess
from collections import Counter
from datetime import date, datetime, timezone
from pathlib import Path

from overtime_index.config import GIT_EXECUTABLE, GIT_TIMEOUT
from overtime_index.exceptions import GitCommandError
from overtime_index.models import AuthorIdentity, Commit

logger = logging.getLogger(__name__)

_FIELD_SEP = "\x1f"
_COMMIT_FORMAT = _FIELD_SEP.join(["%H", "%aI", "%an", "%ae"])
_IDENTITY_FORMAT = _FIELD_SEP.join(["%an", "%ae"])
_ERE_SPECIAL = re.compile(r"([.^$*+?()\[\]{}|\\])")


def ere_escape(text: str) -> str:
    """Escape *text* for git's POSIX extended regular expressions."""
    return _ERE_SPECIAL.sub(r"\\\1", text)


def email_pattern(email: str) -> str:
    """Pattern matching exactly one author email in ``--author``."""
    return f"<{ere_escape(email)}>"


class GitDataSource:
    """Read commits and author identities from a local repository."""

    def __init__(self, executable: str = GIT_EXECUTABLE, timeout: int = GIT_TIMEOUT) -> None:
        self._executable = executable
        self._timeout = timeout

    # ── Subprocess ──────────────────────────────────────────────────────

    def _run(self, path: str | Path, args: list[str]) -> str:
        cmd = [self._executable, "-C", str(path), *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as exc:
            raise GitCommandError(f"git executable not found: {self._executable}") from exc
        except subprocess.TimeoutExpired as exc:
            raise GitCommandError(f"git {args[0]} timed out after {self._timeout}s") from exc

        if result.returncode != 0:
            raise GitCommandError(
                f"git {args[0]} failed (exit {result.returncode}): {result.stderr.strip()}"
            )
        return result.stdout

    @staticmethod
    def _range_args(
        since: date | None,
        until: date | None,
        author_pattern: str | None,
    ) -> list[str]:
        args: list[str] = []
        if since is not None:
            args.append(f"--since={since.isoformat()} 00:00:00")
        if until is not None:
            args.append(f"--until={until.isoformat()} 23:59:59")
        if author_pattern:
            args.extend(["--regexp-ignore-case", "--extended-regexp", f"--author={author_pattern}"])
        return args

    # ── Commits ─────────────────────────────────────────────────────────

    def fetch_commits(
        self,
        path: str | Path,
        since: date | None = None,
        until: date | None = None,
        author_pattern: str | None = None,
    ) -> list[Commit]:
        """All commits in the window, newest first."""
        out = self._run(
            path,
            ["log", f"--format={_COMMIT_FORMAT}", *self._range_args(since, until, author_pattern)],
        )
        return parse_commit_log(out)

    def count_commits(
        self,
        path: str | Path,
        since: date | None = None,
        until: date | None = None,
        author_pattern: str | None = None,
    ) -> int:
        out = self._run(
            path,
            ["log", "--format=%H", *self._range_args(since, until, author_pattern)],
        )
        return sum(1 for line in out.splitlines() if line.strip())

    # ── Authors ─────────────────────────────────────────────────────────

    def fetch_all_authors(
        self,
        path: str | Path,
        since: date | None = None,
        until: date | None = None,
    ) -> list[AuthorIdentity]:
        """Distinct identities, most active first (ties keep first-seen order)."""
        out = self._run(
            path,
            ["log", f"--format={_IDENTITY_FORMAT}", *self._range_args(since, until, None)],
        )
        counts: Counter[AuthorIdentity] = Counter()
        for line in out.splitlines():
            parts = line.split(_FIELD_SEP)
            if len(parts) != 2:
                continue
            counts[AuthorIdentity(name=parts[0].strip(), email=parts[1].strip())] += 1
        return [identity for identity, _count in counts.most_common()]

    def resolve_self_identity(self, path: str | Path) -> AuthorIdentity:
        """The identity configured as ``user.name`` / ``user.email``."""
        name = self._config_value(path, "user.name")
        email = self._config_value(path, "user.email")
        if not name and not email:
            raise GitCommandError("git user.name and user.email are not configured")
        return AuthorIdentity(name=name, email=email)

    def _config_value(self, path: str | Path, key: str) -> str:
        try:
            return self._run(path, ["config", "--get", key]).strip()
        except GitCommandError:
            # `git config --get` exits 1 for an unset key
            return ""

    # ── Commit dates ────────────────────────────────────────────────────

    def fetch_last_commit_date(self, path: str | Path) -> date | None:
        out = self._run(path, ["log", "-1", "--format=%aI"])
        return _first_date(out)

    def fetch_first_commit_date(self, path: str | Path) -> date | None:
        out = self._run(path, ["log", "--reverse", "--format=%aI"])
        return _first_date(out)

    def __repr__(self) -> str:
        return f"GitDataSource(executable={self._executable!r})"


def _first_date(out: str) -> date | None:
    """UTC calendar date of the first author timestamp in *out*."""
    for line in out.splitlines():
        line = line.strip()
        if line:
            try:
                stamp = datetime.fromisoformat(line.replace("Z", "+00:00"))
                return stamp.astimezone(timezone.utc).date()
            except ValueError:
                logger.warning("Unexpected date in git output: %r", line)
                return None
    return None


def parse_commit_log(out: str) -> list[Commit]:
    """Parse ``git log`` output produced with the commit format above.

    Malformed lines are skipped with a debug message.
    """
    commits: list[Commit] = []
    for line in out.splitlines():
        if not line.strip():
            continue
        parts = line.split(_FIELD_SEP)
        if len(parts) != 4:
            logger.debug("Skipping malformed log line: %r", line)
            continue
        _sha, iso_date, name, email = parts
        try:
            timestamp = datetime.fromisoformat(iso_date.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Skipping commit with bad date: %r", iso_date)
            continue
        commits.append(Commit(timestamp=timestamp, author_name=name.strip(), author_email=email.strip()))
    return commits

