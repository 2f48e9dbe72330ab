"""Dataclasses representing open document state and request snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(slots=True)
class DocumentMetadata:
    """Metadata describing a loaded document."""

    path: Optional[Path] = None
    language: str = "plain_text"


@dataclass(slots=True, frozen=True)
class DocumentSnapshot:
    """Immutable view of a document's text at the moment of a request."""

    text: str
    label: str
    path: Optional[Path] = None
    language: str = "plain_text"
    version: int = 1


@dataclass(slots=True)
class DocumentState:
    """In-memory buffer backing one open tab."""

    text: str = ""
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    version_id: int = 1

    def snapshot(self, label: str, *, text: str | None = None) -> DocumentSnapshot:
        """Return a request-scoped snapshot, optionally overriding the text."""

        return DocumentSnapshot(
            text=self.text if text is None else text,
            label=label,
            path=self.metadata.path,
            language=self.metadata.language,
            version=self.version_id,
        )


__all__ = ["DocumentMetadata", "DocumentSnapshot", "DocumentState"]
