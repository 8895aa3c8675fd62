"""Error types for Revdiff.

The diff engine and renderers never raise for string inputs; everything
here belongs to the revision-lookup seam around them.
"""

from typing import Any, Optional


class RevdiffError(Exception):
    """Base exception for all Revdiff errors."""

    def __str__(self) -> str:
        return self.args[0] if self.args else "An error occurred in Revdiff"


class InvalidRevisionRefError(RevdiffError):
    """Raised when a revision reference is not live, head or a number."""

    def __init__(self, ref: str):
        super().__init__(f"invalid revision reference: {ref}")
        self.ref = ref


class RevisionArgumentError(RevdiffError):
    """Raised when positional revisions are mixed with --from/--to."""


class RevisionNotFoundError(RevdiffError):
    """Raised when a revision cannot be resolved or fetched."""

    def __init__(self, message: str, revision: Optional[Any] = None):
        super().__init__(message)
        self.revision = revision


class UnitNotFoundError(RevdiffError):
    """Raised when a unit does not exist in the revision source."""

    def __init__(self, space: str, unit: str):
        super().__init__(f"failed to get unit {unit}: not found in space {space}")
        self.space = space
        self.unit = unit


class RevisionDecodeError(RevdiffError):
    """Raised when stored data is not valid base64 encoded UTF-8 text."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"failed to decode {source} data: {reason}")
        self.source = source


class RevisionSourceError(RevdiffError):
    """Raised when a revision source holds unreadable or malformed records."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


__all__ = [
    "RevdiffError",
    "InvalidRevisionRefError",
    "RevisionArgumentError",
    "RevisionNotFoundError",
    "UnitNotFoundError",
    "RevisionDecodeError",
    "RevisionSourceError",
]
