"""Overtime index: commit-time analysis of a git repository's authors."""

__version__ = "0.1.0"
