"""Closed enumeration of document symbol kinds."""

from __future__ import annotations

import enum
from typing import Any


class SymbolKind(enum.IntEnum):
    """Symbol kinds using the editor's zero-based numbering.

    ``UNKNOWN`` is never produced by a backend; it marks a code outside the
    enumeration so one malformed symbol cannot abort an outline.
    """

    UNKNOWN = -1
    FILE = 0
    MODULE = 1
    NAMESPACE = 2
    PACKAGE = 3
    CLASS = 4
    METHOD = 5
    PROPERTY = 6
    FIELD = 7
    CONSTRUCTOR = 8
    ENUM = 9
    INTERFACE = 10
    FUNCTION = 11
    VARIABLE = 12
    CONSTANT = 13
    STRING = 14
    NUMBER = 15
    BOOLEAN = 16
    ARRAY = 17
    OBJECT = 18
    KEY = 19
    NULL = 20
    ENUM_MEMBER = 21
    STRUCT = 22
    EVENT = 23
    OPERATOR = 24
    TYPE_PARAMETER = 25

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_code(cls, code: Any) -> SymbolKind:
        """Return the kind for ``code``, or ``UNKNOWN`` when it has none."""

        if isinstance(code, bool) or not isinstance(code, int):
            return cls.UNKNOWN
        if code == cls.UNKNOWN.value:
            return cls.UNKNOWN
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


_LABELS: dict[SymbolKind, str] = {
    SymbolKind.UNKNOWN: "Unknown",
    SymbolKind.FILE: "File",
    SymbolKind.MODULE: "Module",
    SymbolKind.NAMESPACE: "Namespace",
    SymbolKind.PACKAGE: "Package",
    SymbolKind.CLASS: "Class",
    SymbolKind.METHOD: "Method",
    SymbolKind.PROPERTY: "Property",
    SymbolKind.FIELD: "Field",
    SymbolKind.CONSTRUCTOR: "Constructor",
    SymbolKind.ENUM: "Enum",
    SymbolKind.INTERFACE: "Interface",
    SymbolKind.FUNCTION: "Function",
    SymbolKind.VARIABLE: "Variable",
    SymbolKind.CONSTANT: "Constant",
    SymbolKind.STRING: "String",
    SymbolKind.NUMBER: "Number",
    SymbolKind.BOOLEAN: "Boolean",
    SymbolKind.ARRAY: "Array",
    SymbolKind.OBJECT: "Object",
    SymbolKind.KEY: "Key",
    SymbolKind.NULL: "Null",
    SymbolKind.ENUM_MEMBER: "EnumMember",
    SymbolKind.STRUCT: "Struct",
    SymbolKind.EVENT: "Event",
    SymbolKind.OPERATOR: "Operator",
    SymbolKind.TYPE_PARAMETER: "TypeParameter",
}


__all__ = ["SymbolKind"]
