"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from tabbridge.editor.workspace import DocumentWorkspace
from tabbridge.services.backend import WorkspaceBackend
from tabbridge.services.diff_presenter import TempFileDiffPresenter

SAMPLE_JS = "function f() {\n  return 1;\n}\n"

SAMPLE_PY = (
    "MAX = 3\n"
    "value = 1\n"
    "\n"
    "\n"
    "class Greeter:\n"
    '    greeting = "hi"\n'
    "\n"
    "    def __init__(self):\n"
    '        self.name = "x"\n'
    "\n"
    "    @property\n"
    "    def title(self):\n"
    "        return self.name\n"
    "\n"
    "    def greet(self):\n"
    "        def inner():\n"
    "            return 1\n"
    "        return inner()\n"
    "\n"
    "\n"
    "async def main():\n"
    "    pass\n"
)

SAMPLE_MD = "# Title\nintro\n## Part A\ntext\n## Part B\nSub\n---\nmore\n"


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    (root / "script.js").write_text(SAMPLE_JS, encoding="utf-8", newline="")
    (root / "greeter.py").write_text(SAMPLE_PY, encoding="utf-8", newline="")
    (root / "notes.md").write_text(SAMPLE_MD, encoding="utf-8", newline="")
    return root


@pytest.fixture
def workspace(project_dir: Path) -> DocumentWorkspace:
    workspace = DocumentWorkspace(project_dir)
    for name in ("script.js", "greeter.py", "notes.md"):
        workspace.open_file(project_dir / name)
    return workspace


@pytest.fixture
def presenter(tmp_path: Path) -> TempFileDiffPresenter:
    return TempFileDiffPresenter(tmp_path / "diffs")


@pytest.fixture
def backend(workspace: DocumentWorkspace, presenter: TempFileDiffPresenter) -> WorkspaceBackend:
    return WorkspaceBackend(workspace, presenter=presenter)


@pytest.fixture
def sample_py() -> str:
    return SAMPLE_PY


@pytest.fixture
def sample_md() -> str:
    return SAMPLE_MD


@pytest.fixture
def sample_js() -> str:
    return SAMPLE_JS
