"""Terminal colorization for diff output.

Colors are named with rich style strings and rendered to inline ANSI SGR
sequences, so the rendered diff is a plain ``str``.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, field_validator
from rich.errors import StyleSyntaxError
from rich.style import Style


class DiffColors(BaseModel):
    """Color slots used by the diff renderers."""

    line_number: str = "bright_blue"
    deleted: str = "red"
    inserted: str = "green"

    @field_validator("line_number", "deleted", "inserted")
    @classmethod
    def validate_style(cls, value: str) -> str:
        try:
            Style.parse(value)
        except StyleSyntaxError as exc:
            raise ValueError(f"invalid color style {value!r}: {exc}") from exc
        return value


class Colorizer(Protocol):
    """Applies color to the three kinds of diff output fragments."""

    def line_number(self, text: str) -> str: ...

    def deleted(self, text: str) -> str: ...

    def inserted(self, text: str) -> str: ...


class NoColorizer:
    """Colorizer for redirected or non-interactive output."""

    def line_number(self, text: str) -> str:
        return text

    def deleted(self, text: str) -> str:
        return text

    def inserted(self, text: str) -> str:
        return text


class AnsiColorizer:
    """Wrap fragments in ANSI escapes, e.g. ``ESC[31m-text ESC[0m`` for deletions."""

    def __init__(self, colors: DiffColors | None = None) -> None:
        self.colors = colors or DiffColors()
        self._line_number = Style.parse(self.colors.line_number)
        self._deleted = Style.parse(self.colors.deleted)
        self._inserted = Style.parse(self.colors.inserted)

    def line_number(self, text: str) -> str:
        return self._line_number.render(text)

    def deleted(self, text: str) -> str:
        return self._deleted.render(text)

    def inserted(self, text: str) -> str:
        return self._inserted.render(text)


__all__ = ["AnsiColorizer", "Colorizer", "DiffColors", "NoColorizer"]
