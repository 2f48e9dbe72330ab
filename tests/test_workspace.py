"""Unit tests for the workspace/tab management layer."""

from __future__ import annotations

from pathlib import Path

import pytest

from tabbridge.editor.workspace import DocumentWorkspace
from tabbridge.errors import TabNotFoundError


def test_open_file_labels_tab_with_file_name(workspace: DocumentWorkspace, project_dir: Path):
    titles = [tab.title for tab in workspace.iter_tabs()]

    assert titles == ["script.js", "greeter.py", "notes.md"]
    tab = workspace.get_tab("greeter.py")
    assert tab.path == (project_dir / "greeter.py").resolve()
    assert tab.document.metadata.language == "python"


def test_open_file_reuses_existing_tab(workspace: DocumentWorkspace, project_dir: Path):
    first = workspace.get_tab("notes.md")

    again = workspace.open_file(project_dir / "notes.md")

    assert again is first
    assert len(list(workspace.iter_tabs())) == 3


def test_get_tab_resolves_label_then_id_then_path(workspace: DocumentWorkspace, project_dir: Path):
    tab = workspace.get_tab("script.js")

    assert workspace.get_tab(tab.id) is tab
    assert workspace.get_tab(str(project_dir / "script.js")) is tab


def test_duplicate_labels_resolve_to_first_tab_in_order(tmp_path: Path):
    for folder in ("a", "b"):
        (tmp_path / folder).mkdir()
        (tmp_path / folder / "index.js").write_text(folder, encoding="utf-8")
    workspace = DocumentWorkspace(tmp_path)
    first = workspace.open_file(tmp_path / "a" / "index.js")
    workspace.open_file(tmp_path / "b" / "index.js")

    assert workspace.get_tab("index.js") is first


def test_untitled_tabs_receive_sequential_labels():
    workspace = DocumentWorkspace()

    first = workspace.create_tab(text="one")
    second = workspace.create_tab(text="two")

    assert (first.title, second.title) == ("Untitled-1", "Untitled-2")
    assert workspace.relative_path(first) == "Untitled-1"


def test_relative_path_uses_workspace_root(workspace: DocumentWorkspace, tmp_path: Path):
    assert workspace.relative_path(workspace.get_tab("greeter.py")) == "greeter.py"

    outside = tmp_path / "outside.txt"
    outside.write_text("x", encoding="utf-8")
    tab = workspace.open_file(outside)
    assert workspace.relative_path(tab) == str(outside.resolve())


def test_get_tab_rejects_unknown_identifier(workspace: DocumentWorkspace):
    with pytest.raises(TabNotFoundError) as excinfo:
        workspace.get_tab("missing.md")

    assert excinfo.value.identifier == "missing.md"


def test_document_snapshot_carries_buffer_metadata(workspace: DocumentWorkspace):
    tab = workspace.get_tab("notes.md")

    snapshot = tab.document.snapshot(tab.title, text="override")

    assert snapshot.text == "override"
    assert snapshot.label == "notes.md"
    assert snapshot.language == "markdown"
    assert snapshot.path == tab.path
    assert tab.document.text != "override"
