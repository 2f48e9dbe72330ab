"""Document buffers, tabs and the range patch engine."""

from .document_model import DocumentMetadata, DocumentSnapshot, DocumentState
from .patches import EditRequest, apply_edit, line_count, offset_to_position, position_to_offset
from .workspace import DocumentTab, DocumentWorkspace

__all__ = [
    "DocumentMetadata",
    "DocumentSnapshot",
    "DocumentState",
    "DocumentTab",
    "DocumentWorkspace",
    "EditRequest",
    "apply_edit",
    "line_count",
    "offset_to_position",
    "position_to_offset",
]
