"""Resolve ``--self`` / ``--author`` / ``--exclude-authors`` into an author filter."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from overtime_index.exceptions import OptionError
from overtime_index.git_source import GitDataSource, email_pattern, ere_escape
from overtime_index.models import AnalyzeOptions, AuthorIdentity, TimeRange

logger = logging.getLogger(__name__)


@dataclass
class AuthorFilter:
    """Authors selected for an analysis run.

    ``pattern`` is the case-insensitive ``git log --author`` expression, or
    ``None`` when no filtering applies. ``identities`` are the matching
    identities active in the window.
    """

    pattern: str | None
    identities: list[AuthorIdentity]
    info_lines: list[str] = field(default_factory=list)


def parse_exclude_list(value: str | None) -> list[str]:
    """Split a comma-separated ``--exclude-authors`` value."""
    if not value:
        return []
    return [token.strip() for token in value.split(",") if token.strip()]


def _is_excluded(identity: AuthorIdentity, tokens: list[str]) -> bool:
    name = identity.name.lower()
    email = identity.email.lower()
    return any(t in name or t in email for t in tokens)


def _emails_pattern(identities: list[AuthorIdentity]) -> str | None:
    """Alternation of the exact emails of *identities*, or ``None`` when empty."""
    emails = list(dict.fromkeys(i.email for i in identities))
    return "|".join(email_pattern(e) for e in emails) if emails else None


def _compile_author(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise OptionError("--author", f"invalid pattern {pattern!r}: {exc}") from exc


def build_author_filter(
    source: GitDataSource,
    path: str | Path,
    time_range: TimeRange,
    options: AnalyzeOptions,
) -> AuthorFilter:
    """Build the :class:`AuthorFilter` for *options*."""
    identities = source.fetch_all_authors(path, time_range.since, time_range.until)
    pattern: str | None = None
    info: list[str] = []

    if options.self_only:
        me = source.resolve_self_identity(path)
        if me.email:
            pattern = email_pattern(me.email)
            identities = [i for i in identities if i.key == me.key]
        else:
            pattern = ere_escape(me.name)
            identities = [i for i in identities if i.name == me.name]
        info.append(f"Author filter: {me} (--self)")
    elif options.author:
        # matched in Python, handed to git as exact emails: git only speaks POSIX ERE
        regex = _compile_author(options.author)
        identities = [i for i in identities if regex.search(i.name) or regex.search(i.email)]
        pattern = _emails_pattern(identities)
        info.append(f"Author filter: {options.author}")

    tokens = [t.lower() for t in options.exclude_authors if t.strip()]
    if tokens:
        kept = [i for i in identities if not _is_excluded(i, tokens)]
        excluded = len(identities) - len(kept)
        info.append(f"Excluded authors: {', '.join(options.exclude_authors)} ({excluded} identities)")
        if excluded:
            pattern = _emails_pattern(kept)
            identities = kept

    logger.debug("Author filter pattern=%r identities=%d", pattern, len(identities))
    return AuthorFilter(pattern=pattern, identities=identities, info_lines=info)
