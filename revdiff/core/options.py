"""Rendering options passed explicitly to the diff renderers."""

from __future__ import annotations

from dataclasses import dataclass

from revdiff.core.hunks import DEFAULT_CONTEXT_LINES, HUNK_HEADER_STYLES, HunkHeaderStyle


@dataclass(frozen=True)
class DiffOptions:
    """How a segment list should be displayed.

    ``colorize`` applies to the unified view only; the numbered view takes
    its colorizer from the caller.
    """

    unified: bool = False
    colorize: bool = False
    context_lines: int = DEFAULT_CONTEXT_LINES
    hunk_header_style: HunkHeaderStyle = "canonical"
    old_label: str = "a"
    new_label: str = "b"

    def __post_init__(self) -> None:
        if self.context_lines < 0:
            raise ValueError(f"context_lines must be >= 0, got {self.context_lines}")
        if self.hunk_header_style not in HUNK_HEADER_STYLES:
            raise ValueError(
                f"hunk_header_style must be one of {', '.join(HUNK_HEADER_STYLES)}, "
                f"got {self.hunk_header_style!r}"
            )


__all__ = ["DiffOptions"]
