"""Built-in symbol providers producing LSP-shaped symbol trees.

Providers play the role of a language server's document symbol request: they
return plain mappings (``name``/``kind``/``range``/``children``) that go
through :func:`tabbridge.outline.flatten` like any other backend response.
"""

from __future__ import annotations

import ast
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Protocol, Sequence

from ..editor.patches import split_lines
from .kinds import SymbolKind

_LOGGER = logging.getLogger(__name__)

RawSymbol = Dict[str, Any]


class SymbolProvider(Protocol):
    """Produces a raw symbol tree for one language."""

    language: str

    def symbols(self, text: str) -> list[RawSymbol]:
        ...


def _symbol(name: str, kind: SymbolKind, start: tuple[int, int], end: tuple[int, int]) -> RawSymbol:
    return {
        "name": name,
        "kind": int(kind),
        "range": {
            "start": {"line": start[0], "character": start[1]},
            "end": {"line": end[0], "character": end[1]},
        },
        "children": [],
    }


def _line_texts(text: str) -> list[str]:
    return [text[line.start : line.start + line.length] for line in split_lines(text)]


# -----------------------------------------------------------------------------
# Python
# -----------------------------------------------------------------------------


class PythonSymbolProvider:
    """Outline Python sources with :mod:`ast`.

    Classes, functions and module/class level assignments are reported; local
    variables inside functions are not.
    """

    language = "python"

    def symbols(self, text: str) -> list[RawSymbol]:
        try:
            tree = ast.parse(text)
        except (SyntaxError, ValueError) as exc:
            _LOGGER.debug("Python outline skipped, source does not parse: %s", exc)
            return []
        return _PythonWalker(_line_texts(text)).collect(tree.body, scope="module")


class _PythonWalker:
    def __init__(self, lines: Sequence[str]) -> None:
        self._lines = lines

    def collect(self, body: Sequence[ast.stmt], *, scope: str) -> list[RawSymbol]:
        result: list[RawSymbol] = []
        for node in body:
            if isinstance(node, ast.ClassDef):
                entry = self._entry(node, node.name, SymbolKind.CLASS)
                entry["children"] = self.collect(node.body, scope="class")
                result.append(entry)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                entry = self._entry(node, node.name, self._function_kind(node, scope))
                entry["children"] = self.collect(node.body, scope="function")
                result.append(entry)
            elif scope != "function" and isinstance(node, (ast.Assign, ast.AnnAssign)):
                targets = node.targets if isinstance(node, ast.Assign) else [node.target]
                for target in targets:
                    for name in _target_names(target):
                        result.append(self._entry(node, name, self._assignment_kind(name, scope)))
        return result

    @staticmethod
    def _function_kind(node: ast.FunctionDef | ast.AsyncFunctionDef, scope: str) -> SymbolKind:
        if scope != "class":
            return SymbolKind.FUNCTION
        if node.name == "__init__":
            return SymbolKind.CONSTRUCTOR
        for decorator in node.decorator_list:
            if isinstance(decorator, ast.Name) and decorator.id in {"property", "cached_property"}:
                return SymbolKind.PROPERTY
            if isinstance(decorator, ast.Attribute) and decorator.attr in {"setter", "getter", "deleter"}:
                return SymbolKind.PROPERTY
        return SymbolKind.METHOD

    @staticmethod
    def _assignment_kind(name: str, scope: str) -> SymbolKind:
        if scope == "class":
            return SymbolKind.FIELD
        return SymbolKind.CONSTANT if name.isupper() else SymbolKind.VARIABLE

    def _entry(self, node: ast.AST, name: str, kind: SymbolKind) -> RawSymbol:
        start_line = node.lineno - 1
        end_line = (getattr(node, "end_lineno", None) or node.lineno) - 1
        end_col = getattr(node, "end_col_offset", None)
        start = (start_line, self._character(start_line, node.col_offset))
        if end_col is None:
            end = (end_line, len(self._line(end_line)))
        else:
            end = (end_line, self._character(end_line, end_col))
        return _symbol(name, kind, start, end)

    def _line(self, index: int) -> str:
        return self._lines[index] if 0 <= index < len(self._lines) else ""

    def _character(self, line_index: int, byte_offset: int) -> int:
        # ast reports UTF-8 byte columns
        encoded = self._line(line_index).encode("utf-8")
        return len(encoded[:byte_offset].decode("utf-8", errors="ignore"))


def _target_names(target: ast.expr) -> Iterable[str]:
    if isinstance(target, ast.Name):
        yield target.id
    elif isinstance(target, (ast.Tuple, ast.List)):
        for element in target.elts:
            yield from _target_names(element)


# -----------------------------------------------------------------------------
# Markdown
# -----------------------------------------------------------------------------

# Pattern for ATX-style headings: # Heading
MARKDOWN_ATX_HEADING = re.compile(r"^ {0,3}(#{1,6})\s+(.+?)(?:\s+#+)?\s*$")

# Pattern for Setext-style headings (underlined)
MARKDOWN_SETEXT_H1 = re.compile(r"^ {0,3}=+\s*$")
MARKDOWN_SETEXT_H2 = re.compile(r"^ {0,3}-+\s*$")

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")


@dataclass(slots=True)
class _Heading:
    title: str
    level: int
    line: int
    end_line: int = 0
    children: List["_Heading"] = field(default_factory=list)


class MarkdownSymbolProvider:
    """Outline Markdown documents by heading, one ``String`` symbol per section."""

    language = "markdown"

    def symbols(self, text: str) -> list[RawSymbol]:
        lines = _line_texts(text)
        headings = _detect_headings(lines)
        if not headings:
            return []
        _set_end_lines(headings, len(lines) - 1)
        roots = _build_hierarchy(headings)
        return [self._to_symbol(heading, lines) for heading in roots]

    def _to_symbol(self, heading: _Heading, lines: Sequence[str]) -> RawSymbol:
        end = (heading.end_line, len(lines[heading.end_line]))
        entry = _symbol(heading.title, SymbolKind.STRING, (heading.line, 0), end)
        entry["children"] = [self._to_symbol(child, lines) for child in heading.children]
        return entry


def _detect_headings(lines: Sequence[str]) -> list[_Heading]:
    headings: list[_Heading] = []
    fence: str | None = None
    i = 0
    while i < len(lines):
        line = lines[i]
        fence_match = _FENCE_RE.match(line)
        if fence is not None:
            if fence_match and _closes_fence(fence_match, fence):
                fence = None
            i += 1
            continue
        if fence_match and not (fence_match.group(1)[0] == "`" and "`" in fence_match.group(2)):
            fence = fence_match.group(1)
            i += 1
            continue

        match = MARKDOWN_ATX_HEADING.match(line)
        if match:
            headings.append(_Heading(title=match.group(2).strip(), level=len(match.group(1)), line=i))
            i += 1
            continue

        # Setext heading: text line followed by === or ---
        if i + 1 < len(lines) and line.strip():
            next_line = lines[i + 1]
            if MARKDOWN_SETEXT_H1.match(next_line):
                headings.append(_Heading(title=line.strip(), level=1, line=i))
                i += 2
                continue
            if MARKDOWN_SETEXT_H2.match(next_line) and len(next_line.strip()) >= 2:
                headings.append(_Heading(title=line.strip(), level=2, line=i))
                i += 2
                continue
        i += 1
    return headings


def _closes_fence(match: re.Match[str], fence: str) -> bool:
    # Same character, at least as long, nothing after it.
    marker = match.group(1)
    return marker[0] == fence[0] and len(marker) >= len(fence) and not match.group(2).strip()


def _set_end_lines(headings: Sequence[_Heading], last_line: int) -> None:
    for index, heading in enumerate(headings):
        heading.end_line = last_line
        for following in headings[index + 1 :]:
            if following.level <= heading.level:
                heading.end_line = max(heading.line, following.line - 1)
                break


def _build_hierarchy(headings: Sequence[_Heading]) -> list[_Heading]:
    roots: list[_Heading] = []
    stack: list[_Heading] = []
    for heading in headings:
        while stack and stack[-1].level >= heading.level:
            stack.pop()
        if stack:
            stack[-1].children.append(heading)
        else:
            roots.append(heading)
        stack.append(heading)
    return roots


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------


class SymbolProviderRegistry:
    """Maps document languages to symbol providers."""

    def __init__(self, providers: Iterable[SymbolProvider] = ()) -> None:
        self._providers: dict[str, SymbolProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: SymbolProvider) -> None:
        self._providers[provider.language.lower()] = provider

    def for_language(self, language: str | None) -> SymbolProvider | None:
        if not language:
            return None
        return self._providers.get(language.lower())

    def languages(self) -> tuple[str, ...]:
        return tuple(sorted(self._providers))

    @classmethod
    def with_defaults(cls) -> SymbolProviderRegistry:
        return cls([PythonSymbolProvider(), MarkdownSymbolProvider()])


__all__ = [
    "MarkdownSymbolProvider",
    "PythonSymbolProvider",
    "RawSymbol",
    "SymbolProvider",
    "SymbolProviderRegistry",
]
