"""Merge author identities that belong to the same person.

Identities are grouped when they share a normalised display name or a
case-insensitive email. Each group elects one primary identity; every other
identity in the group, including one sharing the primary's email under
another name, is redirected to it.

Statistics are reconciled with a fold that returns a new aggregate:
    - counts are summed,
    - the index is a commit-weighted average,
    - the overtime ratio is recomputed from the summed counts.
Each of these is order-independent, so the merged result depends only on
the merge map and the set of input stats.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable

from overtime_index.config import NOREPLY_MARKERS
from overtime_index.index import format_index, overtime_ratio
from overtime_index.models import AuthorIdentity, AuthorStats

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Lower-case and collapse whitespace: ``"Jane  DOE"`` -> ``"jane doe"``."""
    return _WHITESPACE_RE.sub(" ", name.strip()).lower()


def _is_noreply(identity: AuthorIdentity) -> bool:
    email = identity.key
    return any(marker in email for marker in NOREPLY_MARKERS)


# ── Grouping ────────────────────────────────────────────────────────────────

class _UnionFind:
    def __init__(self, size: int) -> None:
        self._parent = list(range(size))

    def find(self, i: int) -> int:
        while self._parent[i] != i:
            self._parent[i] = self._parent[self._parent[i]]
            i = self._parent[i]
        return i

    def union(self, a: int, b: int) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra != rb:
            # keep the earliest index as root so groups stay in input order
            self._parent[max(ra, rb)] = min(ra, rb)


def group_identities(identities: Iterable[AuthorIdentity]) -> list[list[AuthorIdentity]]:
    """Partition *identities* into groups believed to be one person.

    Groups and their members keep input order.
    """
    unique: list[AuthorIdentity] = list(dict.fromkeys(identities))
    uf = _UnionFind(len(unique))

    first_by_name: dict[str, int] = {}
    first_by_email: dict[str, int] = {}
    for i, identity in enumerate(unique):
        name_key = normalize_name(identity.name)
        if name_key:
            if name_key in first_by_name:
                uf.union(first_by_name[name_key], i)
            else:
                first_by_name[name_key] = i
        if identity.key in first_by_email:
            uf.union(first_by_email[identity.key], i)
        else:
            first_by_email[identity.key] = i

    groups: dict[int, list[AuthorIdentity]] = {}
    for i, identity in enumerate(unique):
        groups.setdefault(uf.find(i), []).append(identity)
    return [groups[root] for root in sorted(groups)]


def elect_primary(group: list[AuthorIdentity]) -> AuthorIdentity:
    """First identity with a real (non-noreply) email, else the first one."""
    for identity in group:
        if not _is_noreply(identity):
            return identity
    return group[0]


def build_merge_map(
    identities: Iterable[AuthorIdentity],
) -> dict[AuthorIdentity, AuthorIdentity]:
    """Map each alias identity to its group's primary identity.

    Aliases sharing the primary's email under another name are included.
    Primary identities themselves are not in the map.
    """
    merge_map: dict[AuthorIdentity, AuthorIdentity] = {}
    for group in group_identities(identities):
        if len(group) < 2:
            continue
        primary = elect_primary(group)
        for identity in group:
            if identity != primary:
                merge_map[identity] = primary
    if merge_map:
        logger.info("Merge map redirects %d identities", len(merge_map))
    return merge_map


# ── Statistics reconciliation ──────────────────────────────────────────────

def fold_stats(
    acc: AuthorStats,
    incoming: AuthorStats,
    primary: AuthorIdentity | None = None,
) -> AuthorStats:
    """Fold *incoming* into *acc*, returning a new :class:`AuthorStats`.

    Neither argument is modified.
    """
    total = acc.total_commits + incoming.total_commits
    if total > 0:
        index_996 = (
            acc.index_996 * acc.total_commits + incoming.index_996 * incoming.total_commits
        ) / total
    else:
        index_996 = acc.index_996

    counts = acc.counts + incoming.counts
    return AuthorStats(
        identity=primary or acc.identity,
        total_commits=total,
        index_996=index_996,
        index_996_display=format_index(index_996),
        overtime_ratio_percent=float(overtime_ratio(counts)),
        working_hour_commits=counts.working_hour,
        overtime_commits=counts.overtime_hour,
        weekday_commits=counts.weekday,
        weekend_commits=counts.weekend,
    )


def merge_author_stats(
    stats: Iterable[AuthorStats],
    merge_map: dict[AuthorIdentity, AuthorIdentity],
) -> list[AuthorStats]:
    """Collapse stats of aliased identities into their primary.

    Output keeps the order in which each primary first appears. Rows are
    keyed by full identity, so identities absent from *merge_map* are never
    folded together and are returned unchanged.
    """
    merged: dict[AuthorIdentity, AuthorStats] = {}

    for stat in stats:
        target = merge_map.get(stat.identity, stat.identity)
        existing = merged.get(target)

        if existing is None:
            merged[target] = stat if target == stat.identity else replace(stat, identity=target)
        else:
            merged[target] = fold_stats(existing, stat, primary=target)

    return list(merged.values())
