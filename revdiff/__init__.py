"""Revdiff - line-oriented diffs between configuration revisions."""

__version__ = "0.3.0"
