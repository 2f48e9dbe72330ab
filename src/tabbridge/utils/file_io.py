"""File IO helpers used by the workspace and diff presenter."""

from __future__ import annotations

import codecs
import locale
import os
import re
import tempfile
from pathlib import Path

__all__ = ["read_text", "write_text", "detect_language", "safe_filename"]

_BOM_MAP: dict[bytes, str] = {
    codecs.BOM_UTF8: "utf-8-sig",
    codecs.BOM_UTF16_LE: "utf-16-le",
    codecs.BOM_UTF16_BE: "utf-16-be",
    codecs.BOM_UTF32_LE: "utf-32-le",
    codecs.BOM_UTF32_BE: "utf-32-be",
}

# File type detection based on extension
_LANGUAGE_MAP: dict[str, str] = {
    ".md": "markdown",
    ".markdown": "markdown",
    ".txt": "plain_text",
    ".text": "plain_text",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".html": "html",
    ".htm": "html",
    ".xml": "xml",
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".css": "css",
    ".rst": "restructuredtext",
    ".toml": "toml",
}


def read_text(path: Path | str, *, encoding: str | None = None, errors: str = "strict") -> str:
    """Read a text file with encoding detection.

    Line breaks are returned untouched so positions computed against the text
    match the file on disk.
    """

    raw = Path(path).read_bytes()
    text = raw.decode(encoding or _detect_encoding(raw), errors=errors)
    return text[1:] if text.startswith("\ufeff") else text


def write_text(path: Path | str, content: str, *, encoding: str = "utf-8") -> Path:
    """Write ``content`` atomically, preserving its line breaks."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    descriptor, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(descriptor, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    finally:
        if os.path.exists(tmp_name):  # pragma: no cover - cleanup path
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
    return target


def detect_language(path: Path | str | None) -> str:
    """Return a language id from the path's extension (``plain_text`` if unknown)."""

    if path is None:
        return "plain_text"
    return _LANGUAGE_MAP.get(Path(path).suffix.lower(), "plain_text")


def safe_filename(label: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9._-]", "_", label).strip("._")
    return slug or "untitled"


def _detect_encoding(raw: bytes) -> str:
    for bom, encoding in _BOM_MAP.items():
        if raw.startswith(bom):
            return encoding

    preferred = locale.getpreferredencoding(False) or "utf-8"
    seen: set[str] = set()
    for candidate in ("utf-8", preferred, "latin-1"):
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        try:
            raw.decode(candidate)
            return candidate
        except UnicodeDecodeError:
            continue
    return "utf-8"
