"""Smoke tests for the overtime index package."""

from __future__ import annotations

import subprocess
import sys

import pytest


def test_module_entry_point() -> None:
    """``python -m overtime_index`` exits 0 and prints version info."""
    result = subprocess.run(
        [sys.executable, "-m", "overtime_index"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "overtime_index" in result.stdout


def test_imports() -> None:
    """All package modules are importable."""
    from overtime_index import __version__
    from overtime_index.analysis import analyze_repository  # noqa: F401
    from overtime_index.cli import main  # noqa: F401
    from overtime_index.config import (
        MIN_AUTHOR_COMMITS,
        MIN_REPO_COMMITS,
        PROJECT_ROOT,
        WORK_END_HOUR,
        WORK_START_HOUR,
    )
    from overtime_index.git_source import GitDataSource  # noqa: F401
    from overtime_index.ranking import rank_authors  # noqa: F401
    from overtime_index.report import format_ranking  # noqa: F401
    from overtime_index.trend import analyze_trend  # noqa: F401

    assert isinstance(__version__, str)
    assert PROJECT_ROOT.exists()
    assert 0 <= WORK_START_HOUR < WORK_END_HOUR <= 24
    assert MIN_AUTHOR_COMMITS < MIN_REPO_COMMITS


def test_version_flag(capsys) -> None:
    from overtime_index.cli import main

    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert "overtime_index v" in capsys.readouterr().out
