"""Revision references, lookup and decoding around the diff engine.

A revision reference is ``live``, ``head`` or a revision number. References
resolve against a unit record fetched from a ``RevisionSource``; the stored
revision data is base64 encoded and decoded here before diffing.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from revdiff.core.diff_engine import DiffSegment, compute_structured_diff
from revdiff.core.errors import (
    InvalidRevisionRefError,
    RevisionArgumentError,
    RevisionDecodeError,
    RevisionNotFoundError,
    RevisionSourceError,
    UnitNotFoundError,
)
from revdiff.utils.log import get_logger

logger = get_logger()

REV_LIVE = "live"
REV_HEAD = "head"

_REVISION_NUMBER_RE = re.compile(r"^\d+$")

RevisionRef = Union[str, int]


class UnitRecord(BaseModel):
    """The parts of a unit needed to resolve symbolic revisions."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str
    head_revision_num: int = Field(
        default=0, validation_alias=AliasChoices("head_revision_num", "HeadRevisionNum")
    )
    live_revision_num: int = Field(
        default=0, validation_alias=AliasChoices("live_revision_num", "LiveRevisionNum")
    )


class RevisionRecord(BaseModel):
    """A stored revision; ``data`` is base64 encoded."""

    model_config = ConfigDict(populate_by_name=True)

    revision_num: int = Field(validation_alias=AliasChoices("revision_num", "RevisionNum"))
    data: str = Field(default="", validation_alias=AliasChoices("data", "Data"))


class RevisionSource(Protocol):
    """Where units and their revisions come from."""

    def get_unit(self, space: str, unit: str) -> UnitRecord: ...

    def get_revision(self, space: str, unit: str, revision_num: int) -> RevisionRecord: ...


@dataclass(frozen=True)
class RevisionDiff:
    """Segments between two resolved revisions plus their display labels."""

    segments: list[DiffSegment]
    from_revision: int
    to_revision: int
    old_label: str
    new_label: str


def parse_revision_ref(ref: RevisionRef) -> RevisionRef:
    """Validate a reference, returning ``live``/``head`` or an ``int``."""
    if isinstance(ref, int):
        return ref
    if ref in (REV_LIVE, REV_HEAD):
        return ref
    if _REVISION_NUMBER_RE.match(ref):
        return int(ref)
    raise InvalidRevisionRefError(ref)


def resolve_revision_number(ref: RevisionRef, unit: UnitRecord) -> int:
    """Map a reference to a concrete revision number for ``unit``."""
    parsed = parse_revision_ref(ref)
    if parsed == REV_HEAD:
        number = unit.head_revision_num
    elif parsed == REV_LIVE:
        number = unit.live_revision_num
    else:
        number = int(parsed)
    if number == 0:
        raise RevisionNotFoundError(f"revision {ref} not found or is invalid", revision=ref)
    return number


def select_revision_refs(
    positional: Sequence[str],
    from_rev: Optional[str] = REV_LIVE,
    to_rev: Optional[str] = REV_HEAD,
) -> tuple[str, str]:
    """Pick the (from, to) references from positional arguments or flags.

    Positional: none compares live to head, one compares live to it, two
    compare the first to the second. Flags default to live and head and
    cannot be combined with positional references.
    """
    from_rev = REV_LIVE if from_rev is None else from_rev
    to_rev = REV_HEAD if to_rev is None else to_rev
    flags_given = from_rev != REV_LIVE or to_rev != REV_HEAD

    if len(positional) > 2:
        raise RevisionArgumentError(
            f"expected at most two revisions, got {len(positional)}"
        )
    if positional and flags_given:
        raise RevisionArgumentError("cannot mix positional arguments with --from/--to flags")

    if flags_given:
        return from_rev or REV_LIVE, to_rev or REV_HEAD
    if len(positional) == 1:
        return REV_LIVE, positional[0]
    if len(positional) == 2:
        return positional[0], positional[1]
    return REV_LIVE, REV_HEAD


def decode_base64_text(data: str, source: str) -> str:
    """Decode standard-alphabet base64 into UTF-8 text; line breaks are ignored."""
    compact = data.replace("\r", "").replace("\n", "")
    try:
        raw = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise RevisionDecodeError(source, str(exc)) from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RevisionDecodeError(source, str(exc)) from exc


def decode_revision_data(data: str, revision_num: int) -> str:
    """Decode base64 revision data into text."""
    return decode_base64_text(data, f"revision {revision_num}")


def revision_label(space: str, unit: str, revision_num: int) -> str:
    """Label used in unified diff file headers."""
    return f"{space}/{unit}/{revision_num}"


class DirectoryRevisionSource:
    """Revision source backed by an exported directory tree.

    Layout::

        <root>/<space>/<unit>/unit.json
        <root>/<space>/<unit>/revisions/<revision_num>.json
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def _unit_dir(self, space: str, unit: str) -> Path:
        for slug in (space, unit):
            if not slug or slug in (".", "..") or "/" in slug or "\\" in slug:
                raise UnitNotFoundError(space, unit)
        return self.root / space / unit

    def _load_json(self, path: Path) -> object:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RevisionSourceError(f"malformed record {path}: {exc}", path=str(path)) from exc
        except OSError as exc:
            raise RevisionSourceError(f"cannot read {path}: {exc}", path=str(path)) from exc

    def get_unit(self, space: str, unit: str) -> UnitRecord:
        path = self._unit_dir(space, unit) / "unit.json"
        if not path.is_file():
            raise UnitNotFoundError(space, unit)
        payload = self._load_json(path)
        try:
            record = UnitRecord.model_validate(payload)
        except ValidationError as exc:
            raise RevisionSourceError(f"invalid unit record {path}: {exc}", path=str(path)) from exc
        logger.debug(
            "[revisions] Loaded unit",
            extra={
                "space": space,
                "unit": unit,
                "head": record.head_revision_num,
                "live": record.live_revision_num,
            },
        )
        return record

    def get_revision(self, space: str, unit: str, revision_num: int) -> RevisionRecord:
        path = self._unit_dir(space, unit) / "revisions" / f"{revision_num}.json"
        if not path.is_file():
            raise RevisionNotFoundError(
                f"failed to get revision {revision_num}: not found", revision=revision_num
            )
        payload = self._load_json(path)
        try:
            return RevisionRecord.model_validate(payload)
        except ValidationError as exc:
            raise RevisionSourceError(
                f"invalid revision record {path}: {exc}", path=str(path)
            ) from exc


def diff_revisions(
    source: RevisionSource,
    space: str,
    unit: str,
    from_ref: RevisionRef = REV_LIVE,
    to_ref: RevisionRef = REV_HEAD,
) -> RevisionDiff:
    """Resolve both references, fetch and decode the data and diff it.

    The ``from`` revision is the old side and ``to`` the new side.
    """
    # Reject malformed references before touching the source.
    parse_revision_ref(from_ref)
    parse_revision_ref(to_ref)

    record = source.get_unit(space, unit)
    from_num = resolve_revision_number(from_ref, record)
    to_num = resolve_revision_number(to_ref, record)

    old_text = decode_revision_data(source.get_revision(space, unit, from_num).data, from_num)
    new_text = decode_revision_data(source.get_revision(space, unit, to_num).data, to_num)

    logger.info(
        "[revisions] Diffing revisions",
        extra={"space": space, "unit": unit, "from": from_num, "to": to_num},
    )
    return RevisionDiff(
        segments=compute_structured_diff(old_text, new_text),
        from_revision=from_num,
        to_revision=to_num,
        old_label=revision_label(space, unit, from_num),
        new_label=revision_label(space, unit, to_num),
    )


__all__ = [
    "REV_HEAD",
    "REV_LIVE",
    "DirectoryRevisionSource",
    "RevisionDiff",
    "RevisionRecord",
    "RevisionRef",
    "RevisionSource",
    "UnitRecord",
    "decode_base64_text",
    "decode_revision_data",
    "diff_revisions",
    "parse_revision_ref",
    "resolve_revision_number",
    "revision_label",
    "select_revision_refs",
]
