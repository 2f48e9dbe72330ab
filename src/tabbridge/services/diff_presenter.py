"""Hand before/after document pairs to a reviewer as unified diffs."""

from __future__ import annotations

import difflib
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

from ..utils.file_io import safe_filename, write_text

_LOGGER = logging.getLogger(__name__)

DiffListener = Callable[["DiffPreview"], None]


@dataclass(slots=True, frozen=True)
class DiffPreview:
    """A proposed change ready for review."""

    label: str
    original: str
    proposed: str
    diff: str
    proposed_path: Path | None
    summary: str


def build_unified_diff(original: str, proposed: str, *, label: str, context: int = 3) -> str:
    """Return a unified diff from ``a/<label>`` to ``b/<label>`` (empty when equal)."""

    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        proposed.splitlines(keepends=True),
        fromfile=f"a/{label}",
        tofile=f"b/{label}",
        n=max(0, context),
    )
    return "".join(diff)


def summarize_change(original: str, proposed: str) -> str:
    delta = len(proposed) - len(original)
    return f"edit: {delta:+d} chars" if delta else "edit: 0 chars"


class TempFileDiffPresenter:
    """Write proposed text beside the original and publish a unified diff.

    The proposed document lands in ``diff_dir`` (the system temp directory by
    default) under the tab label so an external diff viewer can open it.
    """

    def __init__(self, diff_dir: Path | str | None = None, *, context_lines: int = 3) -> None:
        self._diff_dir = Path(diff_dir).expanduser() if diff_dir else Path(tempfile.gettempdir()) / "tabbridge"
        self._context_lines = context_lines
        self._listeners: List[DiffListener] = []
        self._last_preview: DiffPreview | None = None

    @property
    def diff_dir(self) -> Path:
        return self._diff_dir

    @property
    def last_preview(self) -> DiffPreview | None:
        return self._last_preview

    def add_listener(self, listener: DiffListener) -> None:
        self._listeners.append(listener)

    def present(self, original: str, proposed: str, *, label: str) -> DiffPreview:
        target = write_text(self._diff_dir / safe_filename(label), proposed)
        preview = DiffPreview(
            label=label,
            original=original,
            proposed=proposed,
            diff=build_unified_diff(original, proposed, label=label, context=self._context_lines),
            proposed_path=target,
            summary=summarize_change(original, proposed),
        )
        self._last_preview = preview
        _LOGGER.info("Proposed changes for %s written to %s (%s)", label, target, preview.summary)
        for listener in list(self._listeners):
            listener(preview)
        return preview


__all__ = ["DiffPreview", "TempFileDiffPresenter", "build_unified_diff", "summarize_change"]
