"""Error types raised by the analysis core."""

from __future__ import annotations


class OptionError(ValueError):
    """A user-supplied option (``--days``, ``--year``, a date) is malformed.

    Fatal: the command line layer reports it and exits non-zero.
    """

    def __init__(self, option: str, message: str) -> None:
        super().__init__(f"{option}: {message}")
        self.option = option


class GitCommandError(RuntimeError):
    """The ``git`` subprocess could not be run or exited non-zero."""
