"""Editor backend consumed by the HTTP layer.

The backend resolves human-readable tab identifiers to document snapshots and
raw symbol trees, and forwards proposed edits to a diff presenter. It is the
only place that knows where document text comes from.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol, Sequence

from ..editor.document_model import DocumentSnapshot
from ..editor.workspace import DocumentTab, DocumentWorkspace
from ..errors import TabNotFoundError
from ..outline.providers import SymbolProviderRegistry
from ..utils.file_io import read_text
from .diff_presenter import DiffPreview, TempFileDiffPresenter

_LOGGER = logging.getLogger(__name__)

TextSource = Literal["buffer", "disk"]
TEXT_SOURCES: tuple[str, ...] = ("buffer", "disk")


class EditorBackend(Protocol):
    """Capabilities the HTTP layer needs from a running editor."""

    def list_documents(self) -> list[dict[str, str]]:
        ...

    def resolve_document(self, identifier: str) -> DocumentSnapshot:
        ...

    def resolve_symbols(self, identifier: str) -> Sequence[Any]:
        ...

    def present_diff(self, original: str, proposed: str, *, label: str) -> DiffPreview:
        ...


class WorkspaceBackend:
    """:class:`EditorBackend` backed by an in-process :class:`DocumentWorkspace`."""

    def __init__(
        self,
        workspace: DocumentWorkspace,
        *,
        providers: SymbolProviderRegistry | None = None,
        presenter: TempFileDiffPresenter | None = None,
        text_source: TextSource = "buffer",
    ) -> None:
        if text_source not in TEXT_SOURCES:
            raise ValueError(f"Unsupported text source: {text_source!r}")
        self._workspace = workspace
        self._providers = providers or SymbolProviderRegistry.with_defaults()
        self._presenter = presenter or TempFileDiffPresenter()
        self._text_source = text_source

    @property
    def workspace(self) -> DocumentWorkspace:
        return self._workspace

    @property
    def presenter(self) -> TempFileDiffPresenter:
        return self._presenter

    def list_documents(self) -> list[dict[str, str]]:
        return [
            {"tabName": tab.title, "path": self._workspace.relative_path(tab)}
            for tab in self._workspace.iter_tabs()
        ]

    def resolve_document(self, identifier: str) -> DocumentSnapshot:
        tab = self._workspace.get_tab(identifier)
        return tab.document.snapshot(tab.title, text=self._read(tab))

    def resolve_symbols(self, identifier: str) -> Sequence[Any]:
        snapshot = self.resolve_document(identifier)
        provider = self._providers.for_language(snapshot.language)
        if provider is None:
            _LOGGER.debug("No symbol provider for %s (%s)", snapshot.label, snapshot.language)
            return []
        return provider.symbols(snapshot.text)

    def present_diff(self, original: str, proposed: str, *, label: str) -> DiffPreview:
        return self._presenter.present(original, proposed, label=label)

    def _read(self, tab: DocumentTab) -> str:
        if self._text_source == "buffer" or tab.path is None:
            return tab.document.text
        try:
            return read_text(tab.path)
        except FileNotFoundError as exc:
            raise TabNotFoundError(tab.title, f"File for tab {tab.title} no longer exists") from exc


__all__ = ["EditorBackend", "TEXT_SOURCES", "TextSource", "WorkspaceBackend"]
