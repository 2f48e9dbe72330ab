"""Expose an editor's open documents, outlines and edit proposals over HTTP."""

from .core.positions import Position, Range
from .editor.patches import EditRequest, apply_edit
from .errors import RangeError, SymbolFormatError, TabNotFoundError
from .outline import SymbolKind, SymbolNode, flatten, render

__all__ = [
    "EditRequest",
    "Position",
    "Range",
    "RangeError",
    "SymbolFormatError",
    "SymbolKind",
    "SymbolNode",
    "TabNotFoundError",
    "apply_edit",
    "flatten",
    "render",
]

__version__ = "0.1.0"
