"""Line/character range edits applied as plain text substitutions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Tuple

from ..core.positions import Position, Range
from ..errors import RangeError

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


@dataclass(slots=True, frozen=True)
class EditRequest:
    """Replacement of ``range`` with ``replacement_text`` in one document."""

    range: Range
    replacement_text: str

    def __post_init__(self) -> None:
        if not isinstance(self.replacement_text, str):
            raise TypeError("EditRequest replacement_text must be a string")
        object.__setattr__(self, "range", Range.from_value(self.range))


@dataclass(slots=True, frozen=True)
class _Line:
    start: int
    length: int
    break_width: int


def split_lines(text: str) -> Tuple[_Line, ...]:
    """Return the addressable lines of ``text`` with their absolute starts.

    Each line keeps its own break (``\\r\\n``, ``\\r`` or ``\\n``). A text that
    is empty or ends with a break has a trailing empty line, matching what an
    editor displays.
    """

    lines: List[_Line] = []
    cursor = 0
    for match in _LINE_BREAK_RE.finditer(text):
        lines.append(_Line(start=cursor, length=match.start() - cursor, break_width=match.end() - match.start()))
        cursor = match.end()
    lines.append(_Line(start=cursor, length=len(text) - cursor, break_width=0))
    return tuple(lines)


def line_count(text: str) -> int:
    """Return the number of addressable lines in ``text``."""

    return len(split_lines(text))


def position_to_offset(text: str, position: Position | Any) -> int:
    """Resolve ``position`` to an absolute character offset into ``text``."""

    return _resolve(split_lines(text), Position.from_value(position))


def offset_to_position(text: str, offset: int) -> Position:
    """Return the position of character ``offset`` in ``text``."""

    if offset < 0 or offset > len(text):
        raise RangeError(
            f"Offset {offset} is outside the document (length {len(text)})",
            reason="overflow",
            limit=len(text),
        )
    lines = split_lines(text)
    for index, line in enumerate(lines):
        if offset < line.start + line.length + line.break_width or index == len(lines) - 1:
            return Position(index, offset - line.start)
    raise AssertionError("unreachable")  # pragma: no cover


def apply_edit(document_text: str, edit: EditRequest) -> str:
    """Return ``document_text`` with ``edit`` applied.

    Raises :class:`RangeError` when either end of the range cannot be resolved;
    the input text is never modified.
    """

    lines = split_lines(document_text)
    start_offset = _resolve(lines, edit.range.start)
    end_offset = _resolve(lines, edit.range.end)
    if start_offset > end_offset:
        raise RangeError(
            f"Start offset {start_offset} is after end offset {end_offset}",
            reason="order",
            position=edit.range.start.to_tuple(),
            limit=end_offset,
        )
    if end_offset > len(document_text):
        raise RangeError(
            f"End offset {end_offset} exceeds document length {len(document_text)}",
            reason="overflow",
            position=edit.range.end.to_tuple(),
            limit=len(document_text),
        )
    return document_text[:start_offset] + edit.replacement_text + document_text[end_offset:]


def _resolve(lines: Tuple[_Line, ...], position: Position) -> int:
    if position.line >= len(lines):
        raise RangeError(
            f"Line {position.line} is outside the document ({len(lines)} lines)",
            reason="line",
            position=position.to_tuple(),
            limit=len(lines) - 1,
        )
    line = lines[position.line]
    width = line.length + line.break_width
    if position.character > width:
        raise RangeError(
            f"Character {position.character} is past the end of line {position.line} (max {width})",
            reason="character",
            position=position.to_tuple(),
            limit=width,
        )
    return line.start + position.character


__all__ = [
    "EditRequest",
    "apply_edit",
    "line_count",
    "offset_to_position",
    "position_to_offset",
    "split_lines",
]
