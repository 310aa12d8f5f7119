"""Tests for the command-line interface."""

from __future__ import annotations

from datetime import date

import pytest

from fakes import MONDAY, SATURDAY, FakeSource, make_commits
from overtime_index.cli import build_parser, main, options_from_args, run
from overtime_index.exceptions import GitCommandError
from overtime_index.models import AuthorIdentity, SortMode


def _repo() -> list:
    return (
        make_commits(30, MONDAY, hours=tuple(range(9, 18)))
        + make_commits(5, MONDAY, hours=(20,))
        + make_commits(5, SATURDAY, hours=(10,))
        + make_commits(10, MONDAY, hours=(10, 11, 12), name="carol", email="carol@example.com")
    )


def _run(argv: list[str], source) -> int:
    return run(build_parser().parse_args(argv), source=source)


class _BrokenSource(FakeSource):
    def count_commits(self, path, since=None, until=None, author_pattern=None):
        raise GitCommandError("git log failed (exit 128): not a git repository")


# ── Argument handling ───────────────────────────────────────────────────────


def test_no_command_prints_banner(capsys) -> None:
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "overtime_index v" in out
    assert "ranking" in out


def test_options_from_args() -> None:
    args = build_parser().parse_args([
        "ranking", "/repo", "--since", "2025-01-01", "--exclude-authors", "bot, ci ,",
        "--merge", "--by", "commits",
    ])
    options = options_from_args(args)
    assert args.path == "/repo"
    assert options.since == date(2025, 1, 1)
    assert options.until is None
    assert options.exclude_authors == ["bot", "ci"]
    assert options.merge is True
    assert options.sort_by is SortMode.COMMITS


def test_unknown_sort_mode_is_rejected() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["ranking", "--by", "alphabetical"])


@pytest.mark.parametrize(
    "argv",
    [
        ["ranking", "--days", "abc"],
        ["ranking", "--days", "0"],
        ["analyze", "--year", "1969"],
        ["trend", "--since", "2025/01/01"],
        ["analyze", "--work-start", "18", "--work-end", "9"],
        ["ranking", "--author", "("],
    ],
)
def test_bad_input_exits_non_zero(argv: list[str], capsys) -> None:
    assert _run(argv, FakeSource(_repo())) == 1
    assert "Error:" in capsys.readouterr().err


# ── Commands ────────────────────────────────────────────────────────────────


def test_analyze_command(capsys) -> None:
    assert _run(["analyze"], FakeSource(_repo())) == 0
    out = capsys.readouterr().out
    assert "Overtime analysis" in out
    assert "Total commits:   50" in out


def test_ranking_command(capsys) -> None:
    assert _run(["ranking", "--all-time"], FakeSource(_repo())) == 0
    out = capsys.readouterr().out
    assert out.index("alice@example.com") < out.index("carol@example.com")
    assert "Legend" in out


def test_ranking_single_author_detail(capsys) -> None:
    assert _run(["ranking", "--all-time", "--author", "alice"], FakeSource(_repo())) == 0
    out = capsys.readouterr().out
    assert "Verdict" in out
    assert "105.0" in out


def test_ranking_self(capsys) -> None:
    me = AuthorIdentity("carol", "carol@example.com")
    assert _run(["ranking", "--all-time", "--self"], FakeSource(_repo(), me=me)) == 0
    out = capsys.readouterr().out
    assert "carol@example.com" in out
    assert "alice@example.com" not in out


def test_trend_command(capsys) -> None:
    assert _run(["trend", "--year", "2025"], FakeSource(_repo())) == 0
    assert "2025-01" in capsys.readouterr().out


def test_small_sample_is_not_an_error(capsys) -> None:
    assert _run(["analyze", "--all-time"], FakeSource(make_commits(5, MONDAY))) == 0
    assert capsys.readouterr().out == ""


def test_git_failure_exits_non_zero(capsys) -> None:
    assert _run(["ranking", "--all-time"], _BrokenSource(_repo())) == 1
    assert "ranking failed" in capsys.readouterr().err
