"""Editor backend, diff presentation and settings services."""

from .backend import EditorBackend, WorkspaceBackend
from .diff_presenter import DiffPreview, TempFileDiffPresenter
from .settings import Settings, SettingsStore

__all__ = [
    "DiffPreview",
    "EditorBackend",
    "Settings",
    "SettingsStore",
    "TempFileDiffPresenter",
    "WorkspaceBackend",
]
