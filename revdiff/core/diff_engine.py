"""Line-oriented structured diff between two text blobs.

Every line becomes one character so diff-match-patch computes a minimal
edit script over lines, which is then expanded back into classified line
ranges (``DiffSegment``). Symbol tables are built per call.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from diff_match_patch import diff_match_patch

from revdiff.utils.log import get_logger

logger = get_logger()

# Placeholders for lines found on one side only.
_OLD_ONLY = "\x00"
_NEW_ONLY = "\x01"
_FIRST_SHARED_SYMBOL = 2
_MAX_SHARED_LINES = sys.maxunicode + 1 - _FIRST_SHARED_SYMBOL


class SegmentType(str, Enum):
    """Classification of a run of lines."""

    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


def split_lines(text: str) -> list[str]:
    """Split ``text`` on newlines, dropping the one empty element a trailing newline leaves.

    ``"a\\nb\\n"`` and ``"a\\nb"`` both give ``["a", "b"]``; ``""`` gives ``[]``.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


@dataclass(frozen=True)
class DiffSegment:
    """A maximal run of consecutive lines sharing one classification.

    Line ranges are 1-indexed and inclusive; a side the segment does not
    touch keeps 0 for both of its fields.
    """

    type: SegmentType
    content: str
    start_line_old: int = 0
    end_line_old: int = 0
    start_line_new: int = 0
    end_line_new: int = 0

    @property
    def lines(self) -> list[str]:
        return split_lines(self.content)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def has_old_side(self) -> bool:
        return self.type in (SegmentType.EQUAL, SegmentType.DELETE)

    @property
    def has_new_side(self) -> bool:
        return self.type in (SegmentType.EQUAL, SegmentType.INSERT)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict, omitting unset line fields."""
        result: dict[str, Any] = {"type": self.type.value, "content": self.content}
        for key in ("start_line_old", "end_line_old", "start_line_new", "end_line_new"):
            value = getattr(self, key)
            if value:
                result[key] = value
        return result


@dataclass(frozen=True)
class DiffStats:
    """Changed-line totals for a segment list."""

    additions: int = 0
    deletions: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(self.additions or self.deletions)


def _split_keepends(text: str) -> list[str]:
    """Split on ``\\n`` keeping the terminators; an unterminated last line stays as is."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _encode_lines(old_lines: Sequence[str], new_lines: Sequence[str]) -> Optional[tuple[str, str]]:
    """Map both line lists onto one character per line.

    Only lines present on both sides get a symbol of their own. Lines found
    on one side only share that side's placeholder, which never occurs on
    the other side. Returns ``None`` when the shared lines outnumber the
    available code points.
    """
    shared = set(old_lines).intersection(new_lines)
    if len(shared) > _MAX_SHARED_LINES:
        return None

    symbols: dict[str, str] = {}
    for line in old_lines:
        if line in shared and line not in symbols:
            symbols[line] = chr(_FIRST_SHARED_SYMBOL + len(symbols))
    old_chars = "".join(symbols.get(line, _OLD_ONLY) for line in old_lines)
    new_chars = "".join(symbols.get(line, _NEW_ONLY) for line in new_lines)
    return old_chars, new_chars


def _dmp_runs(old_chars: str, new_chars: str) -> list[tuple[int, int]]:
    dmp = diff_match_patch()
    dmp.Diff_Timeout = 0
    return [(op, len(chars)) for op, chars in dmp.diff_main(old_chars, new_chars, False) if chars]


def _myers_runs(old_lines: Sequence[str], new_lines: Sequence[str]) -> list[tuple[int, int]]:
    """Shortest edit script by a greedy Myers search over integer line ids."""
    ids: dict[str, int] = {}
    old_ids = [ids.setdefault(line, len(ids)) for line in old_lines]
    new_ids = [ids.setdefault(line, len(ids)) for line in new_lines]
    n, m = len(old_ids), len(new_ids)

    # frontier[k] is the furthest x reached on diagonal k = x - y.
    frontier = {1: 0}
    trace: list[dict[int, int]] = []
    for d in range(n + m + 1):
        trace.append(dict(frontier))
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and frontier[k - 1] < frontier[k + 1]):
                x = frontier[k + 1]
            else:
                x = frontier[k - 1] + 1
            y = x - k
            while x < n and y < m and old_ids[x] == new_ids[y]:
                x += 1
                y += 1
            frontier[k] = x
            if x >= n and y >= m:
                return _group_ops(_backtrack(trace, n, m))
    return []


def _backtrack(trace: list[dict[int, int]], n: int, m: int) -> list[int]:
    ops: list[int] = []
    x, y = n, m
    for d in range(len(trace) - 1, -1, -1):
        frontier = trace[d]
        k = x - y
        if k == -d or (k != d and frontier[k - 1] < frontier[k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = frontier[prev_k]
        prev_y = prev_x - prev_k
        while x > prev_x and y > prev_y:
            ops.append(diff_match_patch.DIFF_EQUAL)
            x -= 1
            y -= 1
        if d > 0:
            ops.append(diff_match_patch.DIFF_INSERT if x == prev_x else diff_match_patch.DIFF_DELETE)
        x, y = prev_x, prev_y
    ops.reverse()
    return ops


def _group_ops(ops: Iterable[int]) -> list[tuple[int, int]]:
    """Collapse single-line ops into runs, deletions before insertions."""
    runs: list[tuple[int, int]] = []
    pending = {diff_match_patch.DIFF_DELETE: 0, diff_match_patch.DIFF_INSERT: 0}

    def flush() -> None:
        for op, count in pending.items():
            if count:
                runs.append((op, count))
                pending[op] = 0

    for op in ops:
        if op != diff_match_patch.DIFF_EQUAL:
            pending[op] += 1
            continue
        flush()
        if runs and runs[-1][0] == diff_match_patch.DIFF_EQUAL:
            runs[-1] = (op, runs[-1][1] + 1)
        else:
            runs.append((op, 1))
    flush()
    return runs


def compute_structured_diff(old_text: str, new_text: str) -> list[DiffSegment]:
    """Diff two texts line by line and return segments in document order.

    Concatenating the ``content`` of equal+delete segments reproduces
    ``old_text``; equal+insert segments reproduce ``new_text``.
    """
    old_lines = _split_keepends(old_text)
    new_lines = _split_keepends(new_text)

    encoded = _encode_lines(old_lines, new_lines)
    if encoded is not None:
        runs = _dmp_runs(*encoded)
    else:
        logger.debug(
            "[diff] Shared lines exceed the symbol range, using integer Myers search",
            extra={"old_lines": len(old_lines), "new_lines": len(new_lines)},
        )
        runs = _myers_runs(old_lines, new_lines)

    segments: list[DiffSegment] = []
    old_index = 0
    new_index = 0
    for op, count in runs:
        if op == diff_match_patch.DIFF_INSERT:
            segment = DiffSegment(
                type=SegmentType.INSERT,
                content="".join(new_lines[new_index : new_index + count]),
                start_line_new=new_index + 1,
                end_line_new=new_index + count,
            )
            new_index += count
        elif op == diff_match_patch.DIFF_DELETE:
            segment = DiffSegment(
                type=SegmentType.DELETE,
                content="".join(old_lines[old_index : old_index + count]),
                start_line_old=old_index + 1,
                end_line_old=old_index + count,
            )
            old_index += count
        else:
            segment = DiffSegment(
                type=SegmentType.EQUAL,
                content="".join(old_lines[old_index : old_index + count]),
                start_line_old=old_index + 1,
                end_line_old=old_index + count,
                start_line_new=new_index + 1,
                end_line_new=new_index + count,
            )
            old_index += count
            new_index += count
        segments.append(segment)

    logger.debug(
        "[diff] Computed structured diff",
        extra={
            "segment_count": len(segments),
            "old_lines": old_index,
            "new_lines": new_index,
        },
    )
    return segments


def summarize(segments: Iterable[DiffSegment]) -> DiffStats:
    """Count inserted and deleted lines."""
    additions = 0
    deletions = 0
    for segment in segments:
        if not segment.has_old_side:
            additions += segment.line_count
        elif not segment.has_new_side:
            deletions += segment.line_count
    return DiffStats(additions=additions, deletions=deletions)


def segments_to_json(segments: Sequence[DiffSegment], indent: int | None = 2) -> str:
    """Serialize segments to a JSON array."""
    return json.dumps([segment.to_dict() for segment in segments], indent=indent, ensure_ascii=False)


__all__ = [
    "DiffSegment",
    "DiffStats",
    "SegmentType",
    "compute_structured_diff",
    "segments_to_json",
    "split_lines",
    "summarize",
]
