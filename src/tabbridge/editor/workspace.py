"""Workspace model managing the set of open document tabs."""

from __future__ import annotations

import logging
import os
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List

from ..errors import TabNotFoundError
from ..utils.file_io import detect_language, read_text
from .document_model import DocumentMetadata, DocumentState

__all__ = ["DocumentTab", "DocumentWorkspace"]

_LOGGER = logging.getLogger(__name__)


def _generate_tab_id() -> str:
    return uuid.uuid4().hex


def _normalize_path(path: Path | str | None) -> Path | None:
    if path is None:
        return None
    return Path(path).expanduser().resolve()


@dataclass(slots=True)
class DocumentTab:
    """An open tab: its buffer plus the label clients address it by."""

    id: str
    document: DocumentState
    title: str = "Untitled"
    untitled_index: int | None = None

    @property
    def path(self) -> Path | None:
        return self.document.metadata.path

    def update_title(self, fallback: str = "Untitled") -> None:
        """Refresh the label shown in the tab strip."""

        path = self.document.metadata.path
        if path is not None:
            self.title = path.name or str(path)
        else:
            suffix = f"-{self.untitled_index}" if self.untitled_index else ""
            self.title = f"{fallback}{suffix}"


class DocumentWorkspace:
    """Ordered registry of open tabs, safe to query from the server thread."""

    def __init__(self, root: Path | str | None = None) -> None:
        self._root = _normalize_path(root) or Path.cwd().resolve()
        self._tabs: Dict[str, DocumentTab] = {}
        self._order: List[str] = []
        self._untitled_counter = 1
        self._lock = threading.RLock()

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Tab lifecycle helpers
    # ------------------------------------------------------------------
    def create_tab(
        self,
        *,
        text: str = "",
        path: Path | str | None = None,
        title: str | None = None,
        language: str | None = None,
        tab_id: str | None = None,
    ) -> DocumentTab:
        """Open a tab over an in-memory buffer."""

        resolved_path = _normalize_path(path)
        metadata = DocumentMetadata(
            path=resolved_path,
            language=language or detect_language(resolved_path),
        )
        document = DocumentState(text=text, metadata=metadata)
        with self._lock:
            untitled_index = self._reserve_untitled_index() if resolved_path is None else None
            tab = DocumentTab(id=tab_id or _generate_tab_id(), document=document, untitled_index=untitled_index)
            if title:
                tab.title = title
            else:
                tab.update_title()
            self._tabs[tab.id] = tab
            self._order.append(tab.id)
        _LOGGER.debug("Opened tab %s (%s)", tab.title, tab.id)
        return tab

    def open_file(self, path: Path | str) -> DocumentTab:
        """Open ``path`` in a new tab, or return the tab already showing it."""

        existing = self.find_tab_by_path(path)
        if existing is not None:
            return existing
        text = read_text(path)
        return self.create_tab(text=text, path=path)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def iter_tabs(self) -> Iterator[DocumentTab]:
        with self._lock:
            tabs = [self._tabs[tab_id] for tab_id in self._order]
        yield from tabs

    def get_tab(self, identifier: str) -> DocumentTab:
        """Resolve ``identifier`` as a label, then a tab id, then a path.

        Labels are not unique; the first tab in tab order wins.
        """

        tab = self.find_tab_by_label(identifier)
        if tab is not None:
            return tab
        with self._lock:
            tab = self._tabs.get(identifier)
        if tab is not None:
            return tab
        tab = self.find_tab_by_path(identifier)
        if tab is not None:
            return tab
        raise TabNotFoundError(identifier)

    def find_tab_by_label(self, label: str) -> DocumentTab | None:
        for tab in self.iter_tabs():
            if tab.title == label:
                return tab
        return None

    def find_tab_by_path(self, path: Path | str) -> DocumentTab | None:
        try:
            normalized = _normalize_path(path)
        except (OSError, RuntimeError):
            return None
        if normalized is None:
            return None
        for tab in self.iter_tabs():
            if tab.path is not None and tab.path == normalized:
                return tab
        return None

    def relative_path(self, tab: DocumentTab) -> str:
        """Return the tab's path relative to the workspace root when possible."""

        if tab.path is None:
            return tab.title
        try:
            return tab.path.relative_to(self._root).as_posix()
        except ValueError:
            return os.fspath(tab.path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _reserve_untitled_index(self) -> int:
        value = self._untitled_counter
        self._untitled_counter += 1
        return value
