"""Group diff segments into unified-diff hunks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence, get_args

from revdiff.core.diff_engine import DiffSegment, SegmentType

DEFAULT_CONTEXT_LINES = 3

HunkHeaderStyle = Literal["canonical", "legacy"]
HUNK_HEADER_STYLES: tuple[str, ...] = get_args(HunkHeaderStyle)


@dataclass(frozen=True)
class Line:
    """One physical line with its classification.

    ``old_line``/``new_line`` are 0 on a side the line does not exist on.
    """

    type: SegmentType
    content: str
    old_line: int = 0
    new_line: int = 0

    @property
    def is_change(self) -> bool:
        return self.type != SegmentType.EQUAL

    @property
    def has_old_side(self) -> bool:
        return self.type != SegmentType.INSERT

    @property
    def has_new_side(self) -> bool:
        return self.type != SegmentType.DELETE


@dataclass(frozen=True)
class Hunk:
    """A contiguous run of lines selected for unified output.

    ``old_before``/``new_before`` count the lines on each side that precede
    the hunk; they anchor a side that has no lines inside the hunk.
    """

    lines: tuple[Line, ...]
    old_before: int = 0
    new_before: int = 0

    @property
    def old_count(self) -> int:
        return sum(1 for line in self.lines if line.has_old_side)

    @property
    def new_count(self) -> int:
        return sum(1 for line in self.lines if line.has_new_side)

    @property
    def old_start(self) -> int:
        return self.old_before + 1 if self.old_count else self.old_before

    @property
    def new_start(self) -> int:
        return self.new_before + 1 if self.new_count else self.new_before

    def header(self, style: HunkHeaderStyle = "canonical") -> str:
        """Return the ``@@ -a,b +c,d @@`` line for this hunk."""
        if style == "legacy":
            old_start, old_count, new_start, new_count = self._legacy_ranges()
        else:
            old_start, old_count = self.old_start, self.old_count
            new_start, new_count = self.new_start, self.new_count
        return f"@@ -{old_start},{old_count} +{new_start},{new_count} @@"

    def _legacy_ranges(self) -> tuple[int, int, int, int]:
        # New side is anchored and counted on inserted lines only.
        old_start = old_count = new_start = new_count = 0
        for line in self.lines:
            if line.type == SegmentType.INSERT:
                if new_start == 0:
                    new_start = line.new_line
                new_count += 1
            else:
                if old_start == 0:
                    old_start = line.old_line
                old_count += 1
        return old_start, old_count, new_start, new_count


def flatten_segments(segments: Sequence[DiffSegment]) -> list[Line]:
    """Expand segments into one ``Line`` per physical line."""
    lines: list[Line] = []
    for segment in segments:
        for offset, content in enumerate(segment.lines):
            lines.append(
                Line(
                    type=segment.type,
                    content=content,
                    old_line=segment.start_line_old + offset if segment.has_old_side else 0,
                    new_line=segment.start_line_new + offset if segment.has_new_side else 0,
                )
            )
    return lines


def mark_hunk_lines(lines: Sequence[Line], context_lines: int = DEFAULT_CONTEXT_LINES) -> list[bool]:
    """Flag changed lines and the equal lines within ``context_lines`` of one."""
    in_hunk = [False] * len(lines)
    for index, line in enumerate(lines):
        if not line.is_change:
            continue
        in_hunk[index] = True
        low = max(0, index - context_lines)
        high = min(len(lines) - 1, index + context_lines)
        for near in range(low, high + 1):
            if lines[near].type == SegmentType.EQUAL:
                in_hunk[near] = True
    return in_hunk


def group_hunks(lines: Sequence[Line], context_lines: int = DEFAULT_CONTEXT_LINES) -> list[Hunk]:
    """Group maximal runs of in-hunk lines into hunks.

    Returns an empty list when no line is an insert or delete.
    """
    if not any(line.is_change for line in lines):
        return []

    in_hunk = mark_hunk_lines(lines, context_lines)
    hunks: list[Hunk] = []
    current: list[Line] = []
    old_seen = 0
    new_seen = 0
    old_before = 0
    new_before = 0
    for line, selected in zip(lines, in_hunk):
        if selected:
            if not current:
                old_before, new_before = old_seen, new_seen
            current.append(line)
        elif current:
            hunks.append(Hunk(lines=tuple(current), old_before=old_before, new_before=new_before))
            current = []
        old_seen += line.has_old_side
        new_seen += line.has_new_side
    if current:
        hunks.append(Hunk(lines=tuple(current), old_before=old_before, new_before=new_before))
    return hunks


__all__ = [
    "DEFAULT_CONTEXT_LINES",
    "Hunk",
    "HUNK_HEADER_STYLES",
    "HunkHeaderStyle",
    "Line",
    "flatten_segments",
    "group_hunks",
    "mark_hunk_lines",
]
