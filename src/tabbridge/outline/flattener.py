"""Convert backend symbol trees into outline nodes and render them as text.

Backend symbols arrive either as LSP-shaped mappings or as client model
objects exposing the same fields as attributes. Nothing about their shape is
trusted: each field is read and validated on its own, and the resulting
:class:`SymbolNode` tree mirrors the input exactly (same nodes, same order).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Tuple

from ..core.positions import Range
from ..errors import RangeError, SymbolFormatError
from .kinds import SymbolKind

_LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 256
_INDENT_STEP = "  "


@dataclass(slots=True)
class SymbolNode:
    """Normalized outline entry."""

    name: str
    kind: SymbolKind
    range: Range
    children: List["SymbolNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.label,
            "range": self.range.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }


def flatten(raw_symbols: Iterable[Any] | None, *, max_depth: int = DEFAULT_MAX_DEPTH) -> list[SymbolNode]:
    """Relabel a backend symbol tree as :class:`SymbolNode` objects.

    Unknown kind codes become :attr:`SymbolKind.UNKNOWN`. Missing names or
    ranges and trees nested deeper than ``max_depth`` raise
    :class:`SymbolFormatError`.
    """

    roots: list[SymbolNode] = []
    pending: list[tuple[Any, list[SymbolNode], Tuple[int, ...]]] = [(raw_symbols, roots, ())]
    while pending:
        items, sink, parent_path = pending.pop()
        for index, raw in enumerate(_as_sequence(items, parent_path)):
            path = parent_path + (index,)
            if len(path) > max_depth:
                raise SymbolFormatError(f"Symbol tree is nested deeper than {max_depth} levels", path=path)
            node = _convert(raw, path)
            sink.append(node)
            children = _field(raw, "children")
            if children is not None:
                pending.append((children, node.children, path))
    return roots


def iter_nodes(nodes: Sequence[SymbolNode]) -> Iterator[tuple[int, SymbolNode]]:
    """Yield ``(depth, node)`` pairs in pre-order."""

    stack = [(0, node) for node in reversed(nodes)]
    while stack:
        depth, node = stack.pop()
        yield depth, node
        stack.extend((depth + 1, child) for child in reversed(node.children))


def render(nodes: Sequence[SymbolNode], indent: str = "") -> str:
    """Render ``nodes`` as one ``<kind> <name> [sl,sc-el,ec]`` line per symbol."""

    return "".join(
        f"{indent}{_INDENT_STEP * depth}{node.kind.label} {node.name} {node.range.to_text()}\n"
        for depth, node in iter_nodes(nodes)
    )


def outline_to_payload(nodes: Sequence[SymbolNode]) -> list[dict[str, Any]]:
    """Return a JSON-friendly representation of the outline tree."""

    return [node.to_dict() for node in nodes]


def _field(raw: Any, name: str) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name)
    return getattr(raw, name, None)


def _as_sequence(items: Any, path: Tuple[int, ...]) -> Sequence[Any]:
    if items is None:
        return ()
    if isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Iterable):
        raise SymbolFormatError(f"Symbol children must be a sequence, got {type(items).__name__}", path=path)
    return items if isinstance(items, Sequence) else tuple(items)


def _convert(raw: Any, path: Tuple[int, ...]) -> SymbolNode:
    if raw is None:
        raise SymbolFormatError("Symbol entry is empty", path=path)

    name = _field(raw, "name")
    if not isinstance(name, str):
        raise SymbolFormatError("Symbol name must be a string", path=path)

    code = _field(raw, "kind")
    kind = SymbolKind.from_code(code)
    if kind is SymbolKind.UNKNOWN:
        _LOGGER.debug("Symbol %r at %s has unknown kind %r", name, path, code)

    raw_range = _field(raw, "range")
    if raw_range is None:
        location = _field(raw, "location")
        raw_range = _field(location, "range") if location is not None else None
    if raw_range is None:
        raise SymbolFormatError(f"Symbol {name!r} has no range", path=path)
    try:
        symbol_range = Range.from_value(raw_range)
    except RangeError as exc:
        raise SymbolFormatError(f"Symbol {name!r} has an invalid range: {exc.message}", path=path) from exc

    return SymbolNode(name=name, kind=kind, range=symbol_range)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "SymbolNode",
    "flatten",
    "iter_nodes",
    "outline_to_payload",
    "render",
]
