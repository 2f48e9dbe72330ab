"""Core domain types shared by the outline and patch engines."""

from .positions import Position, Range

__all__ = ["Position", "Range"]
