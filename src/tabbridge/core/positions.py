"""Line/character positions and the ranges built from them."""

from __future__ import annotations

import operator
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterator

from ..errors import RangeError


@dataclass(slots=True, frozen=True, order=True)
class Position:
    """Zero-based ``(line, character)`` location inside a document."""

    line: int
    character: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "line", self._coerce_index(self.line, "line"))
        object.__setattr__(self, "character", self._coerce_index(self.character, "character"))

    @staticmethod
    def _coerce_index(value: Any, label: str) -> int:
        if isinstance(value, bool):
            raise RangeError(f"Position {label} must be an integer", reason="invalid")
        try:
            number = operator.index(value)
        except TypeError as exc:
            raise RangeError(f"Position {label} must be an integer", reason="invalid") from exc
        if number < 0:
            raise RangeError(f"Position {label} must not be negative (got {number})", reason="negative")
        return number

    def to_tuple(self) -> tuple[int, int]:
        return (self.line, self.character)

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}

    @classmethod
    def from_value(cls, value: Any) -> Position:
        """Coerce a mapping, ``(line, character)`` pair or attribute object."""

        if isinstance(value, Position):
            return value
        if isinstance(value, Mapping):
            if "line" not in value or "character" not in value:
                raise RangeError("Position mappings require line and character keys", reason="invalid")
            return cls(value["line"], value["character"])
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            seq = list(value)
            if len(seq) != 2:
                raise RangeError("Position sequences must have exactly two entries", reason="invalid")
            return cls(seq[0], seq[1])
        line = getattr(value, "line", None)
        character = getattr(value, "character", None)
        if line is not None and character is not None:
            return cls(line, character)
        raise RangeError("Unsupported Position input", reason="invalid")


@dataclass(slots=True, frozen=True)
class Range(Sequence[Position]):
    """Half-open span ``[start, end)`` between two positions."""

    start: Position
    end: Position

    def __post_init__(self) -> None:
        start = Position.from_value(self.start)
        end = Position.from_value(self.end)
        if end < start:
            raise RangeError(
                f"Range start {start.to_tuple()} is after end {end.to_tuple()}",
                reason="order",
                position=start.to_tuple(),
            )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def __len__(self) -> int:
        return 2

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return (self.start, self.end)[index]
        if index == 0:
            return self.start
        if index == 1:
            return self.end
        raise IndexError("Range index out of range")

    def __iter__(self) -> Iterator[Position]:
        yield self.start
        yield self.end

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when the range collapses to a caret."""

        return self.start == self.end

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Return the range in the LSP JSON shape."""

        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    def to_text(self) -> str:
        """Return the compact ``[sl,sc-el,ec]`` form used by outlines."""

        return (
            f"[{self.start.line},{self.start.character}-"
            f"{self.end.line},{self.end.character}]"
        )

    @classmethod
    def from_positions(cls, start_line: int, start_character: int, end_line: int, end_character: int) -> Range:
        return cls(Position(start_line, start_character), Position(end_line, end_character))

    @classmethod
    def from_value(cls, value: Any) -> Range:
        """Coerce ``value`` into a :class:`Range`.

        Accepts LSP-shaped mappings, attribute objects exposing ``start`` and
        ``end`` and flat ``(start_line, start_char, end_line, end_char)``
        sequences.
        """

        if isinstance(value, Range):
            return value
        if value is None:
            raise RangeError("Range value is required", reason="invalid")
        if isinstance(value, Mapping):
            if "start" not in value or "end" not in value:
                raise RangeError("Range mappings require start and end keys", reason="invalid")
            return cls(Position.from_value(value["start"]), Position.from_value(value["end"]))
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            seq = list(value)
            if len(seq) == 4:
                return cls.from_positions(*seq)
            if len(seq) == 2:
                return cls(Position.from_value(seq[0]), Position.from_value(seq[1]))
            raise RangeError("Range sequences must have two or four entries", reason="invalid")
        start = getattr(value, "start", None)
        end = getattr(value, "end", None)
        if start is not None and end is not None:
            return cls(Position.from_value(start), Position.from_value(end))
        raise RangeError("Unsupported Range input", reason="invalid")


__all__ = ["Position", "Range"]
