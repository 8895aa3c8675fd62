"""Render structured diff segments as numbered or unified text."""

from __future__ import annotations

from typing import Optional, Sequence

from revdiff.core.diff_engine import DiffSegment, SegmentType
from revdiff.core.hunks import DEFAULT_CONTEXT_LINES, HunkHeaderStyle, flatten_segments, group_hunks
from revdiff.core.options import DiffOptions
from revdiff.utils.colorizer import AnsiColorizer, Colorizer, NoColorizer


def find_max_line(segments: Sequence[DiffSegment]) -> int:
    """Return the largest line number on either side."""
    max_line = 0
    for segment in segments:
        max_line = max(max_line, segment.end_line_old, segment.end_line_new)
    return max_line


def format_number(value: int, width: int) -> str:
    """Render a right-aligned line number column."""
    return f"{value:>{width}d}: "


def render_numbered(
    segments: Sequence[DiffSegment],
    colorizer: Optional[Colorizer] = None,
) -> str:
    """Show every line of both inputs with its line number and change marker.

    Equal and inserted lines carry their new-side number, deleted lines their
    old-side number. Blank lines are shown as a single space.
    """
    colors = colorizer if colorizer is not None else AnsiColorizer()
    width = len(str(find_max_line(segments)))
    out: list[str] = []

    for segment in segments:
        for offset, line in enumerate(segment.lines):
            content = line if line else " "
            if segment.type == SegmentType.DELETE:
                number = colors.line_number(format_number(segment.start_line_old + offset, width))
                out.append(number + colors.deleted(f"-{content}"))
            elif segment.type == SegmentType.INSERT:
                number = colors.line_number(format_number(segment.start_line_new + offset, width))
                out.append(number + colors.inserted(f"+{content}"))
            else:
                number = colors.line_number(format_number(segment.start_line_new + offset, width))
                out.append(f"{number}  {content}")

    return "".join(f"{line}\n" for line in out)


def render_unified(
    segments: Sequence[DiffSegment],
    old_label: str,
    new_label: str,
    colorize: bool = False,
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    hunk_header_style: HunkHeaderStyle = "canonical",
    colorizer: Optional[Colorizer] = None,
) -> str:
    """Render a git-style unified diff.

    Returns ``""`` when nothing changed; no file headers are emitted then.
    ``colorizer`` only applies when ``colorize`` is set.
    """
    hunks = group_hunks(flatten_segments(segments), context_lines)
    if not hunks:
        return ""

    colors: Colorizer = NoColorizer()
    if colorize:
        colors = colorizer if colorizer is not None else AnsiColorizer()

    out = [f"--- {old_label}", f"+++ {new_label}"]
    for hunk in hunks:
        out.append(hunk.header(hunk_header_style))
        for line in hunk.lines:
            if line.type == SegmentType.DELETE:
                out.append(colors.deleted(f"-{line.content}"))
            elif line.type == SegmentType.INSERT:
                out.append(colors.inserted(f"+{line.content}"))
            else:
                out.append(f" {line.content}")

    return "".join(f"{line}\n" for line in out)


def render_diff(
    segments: Sequence[DiffSegment],
    options: DiffOptions,
    colorizer: Optional[Colorizer] = None,
) -> str:
    """Render ``segments`` in the format ``options`` selects."""
    if options.unified:
        return render_unified(
            segments,
            options.old_label,
            options.new_label,
            options.colorize,
            context_lines=options.context_lines,
            hunk_header_style=options.hunk_header_style,
            colorizer=colorizer,
        )
    return render_numbered(segments, colorizer)


__all__ = [
    "find_max_line",
    "format_number",
    "render_diff",
    "render_numbered",
    "render_unified",
]
