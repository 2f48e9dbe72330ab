"""Outline flattening and rendering for document symbol trees."""

from .flattener import DEFAULT_MAX_DEPTH, SymbolNode, flatten, iter_nodes, outline_to_payload, render
from .kinds import SymbolKind

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "SymbolKind",
    "SymbolNode",
    "flatten",
    "iter_nodes",
    "outline_to_payload",
    "render",
]
